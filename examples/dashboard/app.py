"""Live dashboard — a model whose counter ticks server-side.

Run with::

    tether serve app:make_model --root .

Every browser that loads ``/js/dashboard/tether.js`` sees ``visitors``
change once a second; editing ``threshold`` in one browser updates all
the others.
"""

import random
import threading
import time
from dataclasses import dataclass, field

from tether import Reactive, ReactiveModel


@dataclass
class Dashboard(ReactiveModel):
    title: str = "Traffic"
    visitors: Reactive[int] = field(default_factory=lambda: Reactive(0))
    threshold: Reactive[float] = field(default_factory=lambda: Reactive(0.5))

    def js_methods(self) -> str:
        return "over: function () { return this.visitors > this.threshold * 100; }"


def _tick(model: Dashboard) -> None:
    while True:
        time.sleep(1)
        model.visitors.value = max(0, model.visitors.value + random.randint(-3, 5))


def make_model() -> Dashboard:
    """Model factory for ``tether serve``."""
    model = Dashboard()
    threading.Thread(target=_tick, args=(model,), daemon=True).start()
    return model
