"""Tether — reactive state sync between Python models and the browser.

Bind a model's fields to browser UI elements over a persistent channel.
Server-side writes to a ``Reactive`` field are pushed to every connected
browser; browser edits are parsed back into typed values, applied once,
and rebroadcast to every other browser.

Quick start::

    from dataclasses import dataclass, field

    import tether
    from tether import Reactive, ReactiveModel

    @dataclass
    class Dashboard(ReactiveModel):
        title: str = "Sales"
        threshold: Reactive[float] = field(default_factory=lambda: Reactive(0.5))

    model = tether.init(Dashboard(), app=chirp_app)
    model.threshold.value = 0.75      # every browser on the channel updates

Field names can be aliased on the wire::

    tether.rendering_mappings({"threshold": "alert-threshold"})   # alertThreshold

"""

# PEP 703: Declare this module as free-threading safe
_Py_mod_gil = 0

__version__ = "0.1.0"
__all__ = [
    "Reactive",
    "ReactiveModel",
    "TetherConfig",
    "__version__",
    "bind",
    "deps",
    "init",
    "register_components",
    "register_deps",
    "rendering_mappings",
    "setup",
]


def __getattr__(name: str) -> object:
    """Lazy imports for the public API.

    Keeps ``import tether`` fast; nothing here touches the web framework.
    """
    if name == "Reactive":
        from tether.reactive.field import Reactive

        return Reactive

    if name == "ReactiveModel":
        from tether.reactive.model import ReactiveModel

        return ReactiveModel

    if name == "TetherConfig":
        from tether.config import TetherConfig

        return TetherConfig

    if name == "init":
        from tether.app import init

        return init

    if name == "bind":
        from tether.app import bind

        return bind

    if name == "setup":
        from tether.reactive.wiring import setup

        return setup

    if name == "rendering_mappings":
        from tether.reactive.mapper import rendering_mappings

        return rendering_mappings

    if name == "deps":
        from tether.reactive.glue import deps

        return deps

    if name == "register_deps":
        from tether.reactive.glue import register_deps

        return register_deps

    if name == "register_components":
        from tether.reactive.render import register_components

        return register_components

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
