"""Coercion of inbound wire values to a field's declared type.

Two rules, applied in order:

1. Declared type is a float and the raw value is integer-shaped: numeric
   conversion (``5`` -> ``5.0``).
2. Otherwise a generic parse: values already of the declared type pass
   through, strings are parsed for the scalar types, and anything
   registered with ``register_parser()`` uses its parser.

Failure raises ``CoercionError``.  Callers decide what to do with it; the
sync handler logs and keeps the raw value.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from decimal import Decimal, InvalidOperation
from typing import Any

from tether._errors import CoercionError

_TRUE = frozenset({"true", "1", "yes"})
_FALSE = frozenset({"false", "0", "no"})


def _parse_bool(raw: str) -> bool:
    lowered = raw.strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    msg = f"invalid boolean literal {raw!r}"
    raise ValueError(msg)


_STRING_PARSERS: dict[type, Callable[[str], Any]] = {
    int: lambda raw: int(raw.strip()),
    float: lambda raw: float(raw.strip()),
    bool: _parse_bool,
    Decimal: lambda raw: Decimal(raw.strip()),
    str: str,
}

_PARSERS: dict[type, Callable[[Any], Any]] = {}
_parsers_lock = threading.Lock()


def register_parser(declared: type, parser: Callable[[Any], Any]) -> None:
    """Use *parser* for inbound values of fields declared as *declared*.

    The parser receives the raw wire value and raises to signal failure.
    """
    with _parsers_lock:
        _PARSERS[declared] = parser


def unregister_parser(declared: type) -> None:
    with _parsers_lock:
        _PARSERS.pop(declared, None)


def is_integer_shaped(raw: Any) -> bool:
    # JSON true/false arrive as bool, which must not pass for a number.
    return isinstance(raw, int) and not isinstance(raw, bool)


def _is_instance(raw: Any, declared: type) -> bool:
    if isinstance(raw, bool) and declared is not bool:
        return declared is object
    return isinstance(raw, declared)


def parse_value(declared: type, raw: Any) -> Any:
    """Generic parse of *raw* into *declared*.

    Raises:
        CoercionError: If no rule converts *raw*.

    """
    parser = _PARSERS.get(declared)
    if parser is not None:
        try:
            return parser(raw)
        except Exception as exc:
            msg = f"cannot parse {raw!r} as {declared.__name__}: {exc}"
            raise CoercionError(msg) from exc

    if declared is type(None) or _is_instance(raw, declared):
        return raw

    if isinstance(raw, str):
        string_parser = _STRING_PARSERS.get(declared)
        if string_parser is not None:
            try:
                return string_parser(raw)
            except (ValueError, InvalidOperation) as exc:
                msg = f"cannot parse {raw!r} as {declared.__name__}: {exc}"
                raise CoercionError(msg) from exc

    # JSON numbers for a Decimal field.
    if declared is Decimal and (is_integer_shaped(raw) or isinstance(raw, float)):
        return Decimal(str(raw))

    msg = f"cannot parse {type(raw).__name__} {raw!r} as {declared.__name__}"
    raise CoercionError(msg)


def coerce(raw: Any, declared: type) -> Any:
    """Convert an inbound *raw* value to *declared*."""
    if issubclass(declared, float) and is_integer_shaped(raw):
        return declared(raw)
    return parse_value(declared, raw)
