import logging
from typing import Callable, Generic, List, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class StateFlow(Generic[T]):
    """Observable holder of a single current value.

    Listeners are called synchronously on every change. Setting a value equal
    to the current one is a no-op.
    """

    def __init__(self, initial: T) -> None:
        self._value = initial
        self._listeners: List[Callable[[T], None]] = []

    @property
    def value(self) -> T:
        return self._value

    def set(self, value: T) -> None:
        if value == self._value:
            return
        self._value = value
        for listener in list(self._listeners):
            try:
                listener(value)
            except Exception:
                logger.exception("State listener failed")

    def subscribe(self, listener: Callable[[T], None]) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    @property
    def subscriber_count(self) -> int:
        return len(self._listeners)
