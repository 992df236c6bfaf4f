from __future__ import annotations

import logging
from typing import Callable, Generic, Optional, TypeVar

from lazyinit.base import HolderState, LazyHolder, ReentrantInitError

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


class SyncHolder(LazyHolder[Callable[[], T]], Generic[T]):
    """
    Compute a value on first access and cache it.

    >>> holder = SyncHolder(lambda: 42, auto_freeze=False)
    >>> holder.inited
    False
    >>> holder.value
    42
    >>> holder.reset(lambda: 43)
    >>> holder.value
    43

    A failing producer is kept, so the next access calls it again.
    """

    _value: Optional[T]

    def __init__(self, producer: Callable[[], T], auto_freeze: Optional[bool] = None) -> None:
        super().__init__(producer, auto_freeze)
        self._update(_value=None)

    def init(self) -> bool:
        if self._state is HolderState.SETTLED:
            return False
        if self._state is HolderState.IN_FLIGHT:
            raise ReentrantInitError(f"{self!r} was accessed by its own producer")
        producer = self._producer
        assert producer is not None
        self._update(_state=HolderState.IN_FLIGHT)
        LOGGER.debug("Initializing %r", self)
        try:
            value = producer()
        except BaseException:
            if not self._superseded(producer):
                self._update(_state=HolderState.IDLE)
            LOGGER.debug("Producer of %r failed", self, exc_info=True)
            raise
        if self._superseded(producer):
            # `reset` from inside the producer armed a new one, run that instead.
            LOGGER.debug("Dropped result of replaced producer of %r", self)
            return self.init()
        self._update(_value=value)
        self._mark_settled()
        return True

    def _superseded(self, producer: Callable[[], T]) -> bool:
        return self._producer is not producer or self._state is not HolderState.IN_FLIGHT

    @property
    def value(self) -> T:
        self.init()
        return self._value  # type: ignore[return-value]

    def _discard(self) -> None:
        self._update(_value=None)
