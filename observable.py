"""
Thread-safe observable value holder.

An :class:`ObservableValue` keeps one current value and notifies registered
observers every time it is replaced.  Writes and notifications happen under
a single re-entrant lock, so concurrent writers are serialised: observers see
values in write order and the last value delivered is the value stored.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Generic, List, Optional, TypeVar

logger = logging.getLogger('mvvm.observable')

T = TypeVar("T")

Observer = Callable[[T], None]


class ObservableValue(Generic[T]):
    """Holds the latest value of type ``T`` and notifies observers on change."""

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.RLock())
        self._value: Optional[T] = None
        self._has_value = False
        self._version = 0
        self._observers: List[Observer] = []

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def value(self) -> Optional[T]:
        """Current value, or ``None`` before the first :meth:`set_value`."""
        with self._cond:
            return self._value

    @property
    def has_value(self) -> bool:
        with self._cond:
            return self._has_value

    @property
    def version(self) -> int:
        """Number of times a value has been set."""
        with self._cond:
            return self._version

    def set_value(self, value: T) -> None:
        """Replace the current value and notify every observer."""
        with self._cond:
            self._value = value
            self._has_value = True
            self._version += 1
            self._cond.notify_all()
            for observer in list(self._observers):
                self._deliver(observer, value)

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def observe(self, observer: Observer) -> Callable[[], None]:
        """Register *observer*; returns a callable that unregisters it.

        If a value is already present it is delivered immediately.
        """
        with self._cond:
            self._observers.append(observer)
            if self._has_value:
                self._deliver(observer, self._value)

        def _unsubscribe() -> None:
            self.remove_observer(observer)

        return _unsubscribe

    def remove_observer(self, observer: Observer) -> None:
        with self._cond:
            try:
                self._observers.remove(observer)
            except ValueError:
                pass

    @property
    def observer_count(self) -> int:
        with self._cond:
            return len(self._observers)

    # ------------------------------------------------------------------
    # Blocking helpers
    # ------------------------------------------------------------------

    def wait(self, timeout: Optional[float] = None) -> T:
        """Block until a value is present and return it.

        Raises:
            TimeoutError: No value was set within *timeout* seconds.
        """
        with self._cond:
            if not self._cond.wait_for(lambda: self._has_value, timeout=timeout):
                raise TimeoutError(f"No value set within {timeout} seconds")
            return self._value

    def wait_for_update(self, since_version: int, timeout: Optional[float] = None) -> T:
        """Block until the value is set again after *since_version*.

        Raises:
            TimeoutError: No newer value was set within *timeout* seconds.
        """
        with self._cond:
            if not self._cond.wait_for(lambda: self._version > since_version, timeout=timeout):
                raise TimeoutError(
                    f"No update after version {since_version} within {timeout} seconds"
                )
            return self._value

    @staticmethod
    def _deliver(observer: Observer, value) -> None:
        try:
            observer(value)
        except Exception:
            logger.exception("Observer %r raised while handling %r", observer, value)

    def __repr__(self) -> str:
        with self._cond:
            return f"ObservableValue(value={self._value!r}, version={self._version})"
