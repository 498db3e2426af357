"""
Observable value store.

A small typed container with get/set/subscribe, passed explicitly to the
objects that need it instead of living in a module-level singleton.
"""
from typing import Callable, Generic, List, TypeVar

from shift_market.utils.logger import get_logger

logger = get_logger("store")

T = TypeVar("T")

Listener = Callable[[T, T], None]


class Store(Generic[T]):
    """Holds one value and notifies listeners with (new, old) when it changes."""

    def __init__(self, initial: T):
        self._value = initial
        self._listeners: List[Listener] = []

    def get(self) -> T:
        return self._value

    def set(self, value: T) -> bool:
        """Replace the value. Returns True when listeners were notified."""
        old = self._value
        if value == old:
            return False
        self._value = value
        for listener in list(self._listeners):
            listener(value, old)
        return True

    def update(self, fn: Callable[[T], T]) -> bool:
        return self.set(fn(self._value))

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; the returned callable unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            try:
                self._listeners.remove(listener)
            except ValueError:
                logger.debug("Listener already unsubscribed")

        return unsubscribe
