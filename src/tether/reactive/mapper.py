"""Field name mapper — server field names to browser (wire) names and back.

The mapping table is process-wide and starts empty.  It is mutated only
through ``rendering_mappings()`` (merge, last registration wins) and read on
every render and every inbound message::

    rendering_mappings({"my_field": "my-field-alias"})
    to_wire_name("my_field")    # "myFieldAlias"
    to_wire_name("other")       # "other"

Mapped values use dash-separated tokens; every token after the first is
camel-cased.  Registration is rare and reads are frequent, so writers take
a lock and readers work on the current dict.
"""

from __future__ import annotations

import re
import threading
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING

from tether._errors import UnknownFieldError

if TYPE_CHECKING:
    from tether._types import WireName

_RENDERING_MAPPINGS: dict[str, str] = {}
_lock = threading.Lock()


def rendering_mappings(mappings: Mapping[str, str] | None = None) -> dict[str, str]:
    """Merge *mappings* into the table and return a snapshot of it."""
    with _lock:
        if mappings:
            _RENDERING_MAPPINGS.update({str(k): str(v) for k, v in mappings.items()})
        return dict(_RENDERING_MAPPINGS)


def clear_rendering_mappings() -> None:
    with _lock:
        _RENDERING_MAPPINGS.clear()


def mapping_keys() -> list[str]:
    return list(_RENDERING_MAPPINGS)


def to_wire_name(field: object) -> WireName:
    """Translate a server field identifier into its wire name."""
    name = str(field)
    mapped = _RENDERING_MAPPINGS.get(name)
    if mapped is None:
        return name
    first, *rest = mapped.split("-")
    if not rest:
        return mapped
    return first + "".join(part[:1].upper() + part[1:] for part in rest)


def from_wire_name(wire: WireName, fields: Iterable[str]) -> str:
    """Resolve a wire name back to one of the declared *fields*.

    A declared field spelled exactly like *wire* wins over an alias.

    Raises:
        UnknownFieldError: If no declared field maps to *wire*.

    """
    declared = list(fields)
    if wire in declared:
        return wire
    for name in declared:
        if to_wire_name(name) == wire:
            return name
    msg = f"No field maps to wire name {wire!r}"
    raise UnknownFieldError(msg)


def camelcase(s: str) -> str:
    """``snake_case`` to ``camelCase``: ``"my_field"`` -> ``"myField"``."""
    return re.sub(r"_(.)", lambda m: m.group(1).upper(), s)
