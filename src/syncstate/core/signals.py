"""
Reactive Signals - Observable State for SyncState

A signal holds one value and notifies its subscribers whenever a new
value is written. The coordinator publishes the model value, the
consolidated validation result and the pending conflict through signals,
so display layers can bind to them without polling.

Key Features:
- Synchronous read (``signal()`` or ``signal.value``) and write (``set``/``update``)
- Subscriber isolation: a failing callback is logged, never propagated
- Unsubscribe handles returned from ``subscribe``
"""

import logging
from typing import Any, Callable, Generic, List, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

SignalCallback = Callable[[str, Any, Any], None]


class Signal(Generic[T]):
    """
    Writable observable value.

    Subscribers are called as ``callback(name, new_value, old_value)``.
    """

    def __init__(self, value: T, name: str = "", equal: Optional[Callable[[Any, Any], bool]] = None):
        self.name = name
        self._value = value
        self._equal = equal
        self._subscribers: List[SignalCallback] = []

    def __call__(self) -> T:
        return self._value

    @property
    def value(self) -> T:
        return self._value

    def set(self, value: T) -> None:
        """Write a new value and notify subscribers if it changed"""
        old_value = self._value
        self._value = value
        if self._equal is not None and self._equal(old_value, value):
            return
        self._notify(value, old_value)

    def update(self, fn: Callable[[T], T]) -> None:
        """Write ``fn(current)``"""
        self.set(fn(self._value))

    def subscribe(self, callback: SignalCallback) -> Callable[[], None]:
        """
        Subscribe to value changes.

        Args:
            callback: Called with (signal name, new value, old value)

        Returns:
            Function that removes the subscription
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def _notify(self, new_value: Any, old_value: Any) -> None:
        for callback in list(self._subscribers):
            try:
                callback(self.name, new_value, old_value)
            except Exception:
                logger.exception("Signal %r subscriber %r failed", self.name, callback)

    def __repr__(self):
        return f"Signal({self.name!r}, {self._value!r})"


def watch(signal: Signal, callback: Callable[[Any], None]) -> Callable[[], None]:
    """Subscribe with a callback that only receives the new value."""
    return signal.subscribe(lambda _name, new_value, _old: callback(new_value))


__all__ = ["Signal", "SignalCallback", "watch"]
