"""Update engine — apply a (field, newval, oldval) triple to a model.

Dispatches on the field's storage kind: a Reactive cell is set (notifying
its listeners, including the outbound push installed by ``setup()``), a
plain attribute is assigned.  Values arrive already coerced; nothing here
converts types.
"""

from __future__ import annotations

from typing import Any

from tether.reactive.field import Reactive
from tether.reactive.model import field_spec


def update[M](model: M, field: str, newval: Any, oldval: Any = None) -> M:
    """Apply *newval* to *field* in place and return *model*.

    *oldval* is accepted for symmetry with the wire message and ignored.

    Raises:
        UnknownFieldError: If the model does not declare *field*.

    """
    field_spec(model, field)
    current = getattr(model, field)
    if isinstance(current, Reactive):
        current.set(newval)
    else:
        setattr(model, field, newval)
    return model
