"""Browser glue — the generated script that binds a Vue app to a channel.

The script served at the model's script endpoint:

1. Creates the Vue app from ``render_model(model)``
2. Opens the channel's SSE stream; the first ``tether:hello`` event carries
   this browser's client id
3. Applies ``tether:update`` events (``{key, value}``) to the Vue data
4. Installs one debounced watcher per field that POSTs edits to the
   channel's watchers endpoint as ``{"payload": {field, newval, oldval}}``

Server updates are applied inside ``watcherMixin.$withoutWatchers``, which
records the JSON of every key the update changed in ``Tether.pushed``.  Vue
runs watchers on a later tick and the debounce delays them further, so the
watcher itself checks ``Tether.isEcho(key, newVal)``: a value equal to the
last one pushed for that key is consumed and not sent back.

``deps()`` renders the ``<script>`` tags a page needs.  Plugins add their
own tags with ``register_deps()``.
"""

from __future__ import annotations

import json
import sys
import threading
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from tether.reactive.mapper import to_wire_name
from tether.reactive.model import model_schema, root
from tether.reactive.render import jsonify, render_model

if TYPE_CHECKING:
    from tether.config import TetherConfig


_PRELUDE = """\
window.Tether = window.Tether || {};
window.Tether.pushed = window.Tether.pushed || {};
window.Tether.isEcho = function (key, value) {
  var pushed = window.Tether.pushed;
  if (!(key in pushed)) return false;
  var echo = pushed[key] === JSON.stringify(value);
  delete pushed[key];
  return echo;
};
var watcherMixin = {
  methods: {
    $withoutWatchers: function (fn) {
      var self = this, before = {};
      Object.keys(self.$data).forEach(function (k) { before[k] = JSON.stringify(self[k]); });
      fn();
      Object.keys(self.$data).forEach(function (k) {
        var now = JSON.stringify(self[k]);
        if (now !== before[k]) window.Tether.pushed[k] = now;
      });
    }
  }
};
"""

# Connection script; placeholders are filled with JSON-encoded values.
_CHANNEL_SCRIPT = """\
(function(app) {
  var state = {client: null};
  var src = new EventSource(%(events)s);
  src.addEventListener('tether:hello', function(e) {
    state.client = e.data;
  });
  src.addEventListener('tether:update', function(e) {
    var d = JSON.parse(e.data);
    app.$withoutWatchers(function() { app[d.key] = d.value; });
  });
  src.onerror = function() {
    setTimeout(function() { location.reload(); }, 2000);
  };
  window.Tether.sendMessageTo = function(payload) {
    var url = %(watchers)s + (state.client ? '?client=' + encodeURIComponent(state.client) : '');
    return fetch(url, {
      method: 'POST',
      headers: {'Content-Type': 'application/json'},
      body: JSON.stringify({payload: payload})
    });
  };
})(%(app)s);
"""


def watch(
    vue_app_name: str,
    field_name: str,
    debounce_ms: int,
    *,
    prod: bool = False,
) -> str:
    """JavaScript installing a debounced watcher for one field."""
    output = (
        f"{vue_app_name}.$watch(function () {{return this.{field_name}}}, "
        f"_.debounce(function(newVal, oldVal){{\n"
        f"  if (window.Tether.isEcho('{field_name}', newVal)) return;\n"
        f"  window.Tether.sendMessageTo({{'field':'{field_name}', "
        f"'newval': newVal, 'oldval': oldVal}});\n"
        f"}}, {debounce_ms}));\n"
    )
    # Production Vue leaves `expression` empty on programmatic watchers.
    if prod:
        output += (
            f"{vue_app_name}._watchers[{vue_app_name}._watchers.length - 1].expression = "
            f"'function () {{return this.{field_name}}}'\n"
        )
    return output + "\n"


def vue_integration(
    model: Any,
    config: TetherConfig,
    *,
    channel: str | None = None,
    vue_app_name: str | None = None,
) -> str:
    """Full glue script for *model* bound to *channel*."""
    channel = channel or config.channel
    app_name = vue_app_name or root(model)
    base = config.base_path.rstrip("/")

    parts = [
        _PRELUDE,
        f"var {app_name} = new Vue({jsonify(render_model(model, vue_app_name=app_name))});\n",
        _CHANNEL_SCRIPT % {
            "events": json.dumps(base + config.events_path(channel)),
            "watchers": json.dumps(base + config.watchers_path(channel)),
            "app": app_name,
        },
    ]
    for spec in model_schema(model):
        parts.append(watch(app_name, to_wire_name(spec.name), config.debounce_ms, prod=config.prod))
    return "".join(parts)


def vuejs(config: TetherConfig) -> str:
    return "vue.min.js" if config.prod else "vue.js"


# ---------------------------------------------------------------------------
# Page dependencies
# ---------------------------------------------------------------------------

_DEPS: list[Callable[[], str]] = []
_SCRIPT_ROUTES: set[str] = set()
_deps_lock = threading.Lock()


def register_deps(provider: Callable[[], str]) -> None:
    """Add *provider*, called on every ``deps()``, whose markup joins the tags."""
    with _deps_lock:
        _DEPS.append(provider)


def register_script_route(path: str) -> None:
    """Note that a glue script is served at *path* (with leading slash)."""
    with _deps_lock:
        _SCRIPT_ROUTES.add(path)


def clear_deps() -> None:
    with _deps_lock:
        _DEPS.clear()
        _SCRIPT_ROUTES.clear()


def deps(config: TetherConfig, channel: str | None = None) -> str:
    """``<script>`` tags a page includes to load the glue for *channel*.

    Order: underscore, Vue, every registered provider, then the model's
    glue script.  The glue tag is left out, with a warning, while no script
    route exists for the channel.  Vue and underscore are expected under
    ``<base_path>js/tether/``; serving them is left to the application.
    """
    base = config.base_path
    endpoint = config.script_endpoint(channel)

    with _deps_lock:
        providers = list(_DEPS)
        served = f"/{endpoint}" in _SCRIPT_ROUTES

    tags = [
        f'<script src="{base}js/tether/underscore-min.js"></script>',
        f'<script src="{base}js/tether/{vuejs(config)}"></script>',
    ]
    tags.extend(markup for markup in (provider() for provider in providers) if markup)
    if served:
        tags.append(f'<script src="{base}{endpoint}"></script>')
    else:
        print(
            f"  Warning: no model is bound for /{endpoint}; "
            "call tether.init(model, app=...) first",
            file=sys.stderr,
        )
    return "\n".join(tags)
