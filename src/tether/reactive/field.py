"""Reactive field — an observable value cell with ordered, keyed listeners.

The unit of reactivity.  Reading returns the current value; writing stores
the new value and then notifies listeners in registration order.

Selective notification lets a caller write the authoritative value without
re-triggering a particular listener::

    cell = Reactive(0)
    cell.on(render_chart, key="chart")
    cell.on(lambda v: push("count", v), key="push")

    cell.set(5, except_keys={"push"})     # only render_chart fires
    cell.set(6, except_positions={1})     # only the push listener fires

Reentrancy:
    Listeners run synchronously from a snapshot of the listener list.  A
    listener may write to this or another cell; the nested write notifies
    its own listeners to completion before the outer loop continues.  No
    lock is held while listeners run, so reentrant writes cannot deadlock.

"""

from __future__ import annotations

import itertools
import threading
from collections.abc import Callable, Collection
from typing import TYPE_CHECKING, Any

from tether._errors import ReactiveError

if TYPE_CHECKING:
    from tether._types import Listener

_auto_keys = itertools.count(1)


class Reactive[T]:
    """Observable value cell holding a value of type ``T``.

    Args:
        value: Initial value.  Its type is the field's declared type when
            inbound edits are coerced.

    """

    __slots__ = ("_listeners", "_lock", "_value")

    def __init__(self, value: T) -> None:
        self._value = value
        self._listeners: list[tuple[str, Listener]] = []
        self._lock = threading.Lock()

    def __repr__(self) -> str:
        return f"Reactive({self._value!r})"

    # ----- value access -----

    def get(self) -> T:
        """Return the current value."""
        return self._value

    @property
    def value(self) -> T:
        return self._value

    @value.setter
    def value(self, new_value: T) -> None:
        self.set(new_value)

    def set(
        self,
        value: T,
        *,
        except_positions: Collection[int] = (),
        except_keys: Collection[str] = (),
        notify: Callable[[Listener], bool] | None = None,
    ) -> None:
        """Store *value* and notify listeners.

        A listener fires only if its 1-based registration position is not in
        *except_positions*, its key is not in *except_keys*, and *notify*
        (when given) returns true for it.

        """
        with self._lock:
            self._value = value
            snapshot = tuple(self._listeners)

        for position, (key, listener) in enumerate(snapshot, start=1):
            if position in except_positions or key in except_keys:
                continue
            if notify is not None and not notify(listener):
                continue
            listener(value)

    # ----- listener management -----

    def on(self, listener: Listener, *, key: str | None = None) -> str:
        """Register *listener* and return its key.

        Raises:
            ReactiveError: If *key* is already registered on this cell.

        """
        with self._lock:
            if key is None:
                key = f"listener-{next(_auto_keys)}"
            elif any(k == key for k, _ in self._listeners):
                msg = f"Listener key {key!r} already registered"
                raise ReactiveError(msg)
            self._listeners.append((key, listener))
        return key

    def off(self, key: str) -> bool:
        """Remove the listener registered under *key*.  Returns True if found."""
        with self._lock:
            for index, (k, _) in enumerate(self._listeners):
                if k == key:
                    del self._listeners[index]
                    return True
        return False

    def has_listener(self, key: str) -> bool:
        with self._lock:
            return any(k == key for k, _ in self._listeners)

    @property
    def listeners(self) -> tuple[Listener, ...]:
        """Registered callbacks in invocation order."""
        with self._lock:
            return tuple(listener for _, listener in self._listeners)

    @property
    def listener_keys(self) -> tuple[str, ...]:
        with self._lock:
            return tuple(k for k, _ in self._listeners)


def unwrap(value: Any) -> Any:
    """Return the inner value of a Reactive, or *value* itself."""
    if isinstance(value, Reactive):
        return value.get()
    return value
