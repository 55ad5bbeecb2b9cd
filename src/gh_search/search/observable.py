"""Latest-value holder with synchronous observer notification."""

import logging
import threading
from collections.abc import Callable
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

Observer = Callable[[T], None]


class StateHolder(Generic[T]):
    """Holds the most recently published value and fans it out to observers.

    Observers are called synchronously, in registration order, on the
    thread that calls :meth:`publish`. Observers attached after a publish do
    not receive that value through their callback, but :attr:`value` always
    returns it.

    Publishes are serialized: a publish from another thread waits until the
    current fan-out has finished, so observers see values in the same order
    as :attr:`value` changes. An observer may publish again from inside its
    callback on the same thread. An observer that raises is logged and the
    remaining observers are still notified.
    """

    def __init__(self, initial: T) -> None:
        self._value = initial
        self._observers: list[Observer[T]] = []
        self._lock = threading.RLock()
        self._publish_lock = threading.RLock()

    @property
    def value(self) -> T:
        """The last published value, or the initial value."""
        with self._lock:
            return self._value

    @property
    def has_observers(self) -> bool:
        with self._lock:
            return bool(self._observers)

    def observe(self, observer: Observer[T]) -> Observer[T]:
        """Attach an observer.

        Args:
            observer: Callable receiving each published value.

        Returns:
            The observer, so it can be passed to :meth:`remove_observer`.
        """
        with self._lock:
            self._observers.append(observer)
        return observer

    def remove_observer(self, observer: Observer[T]) -> None:
        """Detach an observer. Unknown observers are ignored."""
        with self._lock:
            try:
                self._observers.remove(observer)
            except ValueError:
                logger.debug("Observer %r was not attached", observer)

    def publish(self, value: T) -> None:
        """Store a value and notify every observer attached at this moment.

        Args:
            value: New value.
        """
        with self._publish_lock:
            with self._lock:
                self._value = value
                observers = list(self._observers)

            for observer in observers:
                try:
                    observer(value)
                except Exception:
                    logger.exception("Observer %r failed for %r", observer, value)
