"""Renderer — models and single values to transport-ready structures.

``render_model()`` produces the object the browser hands to ``new Vue(...)``:

    {"el": "#dashboard", "data": {...}, "components": "...",
     "methods": JSONText("{ ... }"), "mixins": JSONText("[watcherMixin]")}

``render_value()`` is the single-value path used for push notifications:
Reactive cells are unwrapped, everything else passes through.

``jsonify()`` is the only place values become JSON text.  ``JSONText``
instances are spliced in raw (JavaScript, not data) and the ``"undefined"``
sentinel is emitted unquoted unless escaping is turned off.
"""

from __future__ import annotations

import datetime
import json
import threading
import uuid
from decimal import Decimal
from typing import Any

from tether.reactive.field import Reactive
from tether.reactive.mapper import to_wire_name
from tether.reactive.model import elem, model_schema


class JSONText(str):
    """A string that ``jsonify`` emits verbatim instead of quoting."""

    __slots__ = ()


UNDEFINED = JSONText("undefined")

# ---------------------------------------------------------------------------
# Component registry
# ---------------------------------------------------------------------------

_COMPONENTS: dict[type, list[tuple[str, Any]]] = {}
_components_lock = threading.Lock()


def register_components(model_type: type, pairs: list[tuple[str, Any]]) -> None:
    """Append Vue component registrations for *model_type*."""
    with _components_lock:
        _COMPONENTS.setdefault(model_type, []).extend(pairs)


def components(model_type: type) -> str:
    """Registered components for *model_type* as an unquoted JS object, or ``""``."""
    with _components_lock:
        pairs = list(_COMPONENTS.get(model_type, ()))
    if not pairs:
        return ""
    return json.dumps(dict(pairs)).replace('"', "")


def clear_components() -> None:
    with _components_lock:
        _COMPONENTS.clear()


def js_methods(model: Any) -> str:
    """Body of the Vue ``methods`` object; models override via ``js_methods()``."""
    hook = getattr(model, "js_methods", None)
    if callable(hook):
        return str(hook())
    return ""


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def render_value(value: Any, field: str | None = None) -> Any:
    """Render one field value, recursively unwrapping Reactive cells."""
    if isinstance(value, Reactive):
        return render_value(value.get(), field)
    return value


def render_model(model: Any, *, vue_app_name: str | None = None) -> dict[str, Any]:
    """Render *model* into the structure the UI layer mounts."""
    data: dict[str, Any] = {}
    for spec in model_schema(model):
        data[to_wire_name(spec.name)] = render_value(getattr(model, spec.name), spec.name)

    return {
        "el": f"#{vue_app_name}" if vue_app_name else elem(model),
        "data": data,
        "components": components(type(model)),
        "methods": JSONText(f"{{ {js_methods(model)} }}"),
        "mixins": JSONText("[watcherMixin]"),
    }


def _encode(obj: Any) -> Any:
    # Decimals go out as strings; the coercer parses them back.
    if isinstance(obj, Decimal):
        return str(obj)
    if isinstance(obj, (datetime.date, datetime.time)):
        return obj.isoformat()
    if isinstance(obj, (set, frozenset)):
        return sorted(obj, key=repr)
    msg = f"Object of type {type(obj).__name__} is not JSON serializable"
    raise TypeError(msg)


def jsonify(value: Any, *, escape_undefined: bool = True) -> str:
    """Encode *value* as JSON, splicing ``JSONText`` raw.

    With *escape_undefined* the quoted string ``"undefined"`` becomes the
    bare JavaScript ``undefined``.
    """
    raw: dict[str, str] = {}

    def _mark(obj: Any) -> Any:
        if isinstance(obj, JSONText):
            token = f"__tether_raw_{uuid.uuid4().hex}__"
            raw[token] = str(obj)
            return token
        if isinstance(obj, Reactive):
            return _mark(obj.get())
        if isinstance(obj, dict):
            return {k: _mark(v) for k, v in obj.items()}
        if isinstance(obj, (list, tuple)):
            return [_mark(v) for v in obj]
        return obj

    text = json.dumps(_mark(value), default=_encode)
    for token, js in raw.items():
        text = text.replace(json.dumps(token), js)
    if escape_undefined:
        text = text.replace('"undefined"', "undefined")
    return text
