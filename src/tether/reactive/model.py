"""Model reflection — a cached schema descriptor per model type.

A model is any ``ReactiveModel`` subclass, usually a dataclass whose fields
hold plain values or ``Reactive`` cells::

    @dataclass
    class Dashboard(ReactiveModel):
        title: str = "Sales"
        threshold: Reactive[float] = field(default_factory=lambda: Reactive(0.5))

The schema (field names in declaration order, storage kind, declared type)
is built once per type on first use and reused for every render and every
inbound message.
"""

from __future__ import annotations

import dataclasses
import re
import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from tether._errors import UnknownFieldError
from tether.reactive.field import Reactive

if TYPE_CHECKING:
    from tether._types import FieldKind


class ReactiveModel:
    """Marker base for models bound to a channel.

    Subclasses may define ``js_methods()`` returning the body of the Vue
    ``methods`` object as raw JavaScript.
    """


@dataclass(frozen=True, slots=True)
class FieldSpec:
    """One declared model field.

    Attributes:
        name: Server-side attribute name.
        kind: ``"reactive"`` when the field holds a ``Reactive`` cell.
        type: Type of the (unwrapped) value at schema build time.

    """

    name: str
    kind: FieldKind
    type: type

    @property
    def is_reactive(self) -> bool:
        return self.kind == "reactive"


_SCHEMAS: dict[type, tuple[FieldSpec, ...]] = {}
_schema_lock = threading.Lock()


def _field_names(model: Any) -> list[str]:
    if dataclasses.is_dataclass(model):
        return [f.name for f in dataclasses.fields(model)]
    return [name for name in vars(model) if not name.startswith("_")]


def _describe(model: Any) -> tuple[FieldSpec, ...]:
    specs: list[FieldSpec] = []
    for name in _field_names(model):
        value = getattr(model, name)
        if isinstance(value, Reactive):
            specs.append(FieldSpec(name, "reactive", type(value.get())))
        else:
            specs.append(FieldSpec(name, "plain", type(value)))
    return tuple(specs)


def model_schema(model: Any) -> tuple[FieldSpec, ...]:
    """Return the cached schema for *model*'s type, building it on first use."""
    cls = type(model)
    schema = _SCHEMAS.get(cls)
    if schema is not None:
        return schema
    with _schema_lock:
        schema = _SCHEMAS.get(cls)
        if schema is None:
            schema = _describe(model)
            _SCHEMAS[cls] = schema
    return schema


def field_spec(model: Any, name: str) -> FieldSpec:
    """Look up one field of *model* by server-side name.

    Raises:
        UnknownFieldError: If the model does not declare *name*.

    """
    for spec in model_schema(model):
        if spec.name == name:
            return spec
    msg = f"{type(model).__name__} has no field {name!r}"
    raise UnknownFieldError(msg)


def reactive_fields(model: Any) -> tuple[FieldSpec, ...]:
    return tuple(spec for spec in model_schema(model) if spec.is_reactive)


def declared_type(model: Any, name: str) -> type:
    """Type of the field's current value, unwrapping a Reactive cell."""
    field_spec(model, name)
    value = getattr(model, name)
    if isinstance(value, Reactive):
        return type(value.get())
    return type(value)


def root(model: Any) -> str:
    """DOM id / Vue app name for *model*: its type name, lower-cased alphanumerics."""
    return re.sub(r"[^0-9a-z]", "", type(model).__name__.lower())


def elem(model: Any) -> str:
    return f"#{root(model)}"


def clear_schema_cache() -> None:
    """Drop all cached schemas (tests, hot reload)."""
    with _schema_lock:
        _SCHEMAS.clear()
