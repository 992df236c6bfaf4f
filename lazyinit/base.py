from __future__ import annotations

import enum
import logging
from typing import Any, ClassVar, Generic, Optional, TypeVar

from lazyinit.config import default_auto_freeze

LOGGER = logging.getLogger(__name__)

TProducer = TypeVar("TProducer")


class HolderError(Exception):
    """Common base class for holder-specific errors"""


class FrozenStateError(HolderError, AttributeError):
    """Mutation attempted on a frozen holder"""


class ReentrantInitError(HolderError):
    """Producer tried to read the holder it is initializing"""


class ResetWhilePendingError(HolderError):
    """Computation was replaced by `reset` before it settled"""


class HolderState(enum.Enum):
    IDLE = enum.auto()
    IN_FLIGHT = enum.auto()
    SETTLED = enum.auto()


class LazyHolder(Generic[TProducer]):
    """
    Common shape of the deferred-value holders.

    A holder is armed with a producer, settles on the first successful
    initialization (dropping the producer), and can be re-armed by `reset`
    until it is frozen. With the auto-freeze policy captured at construction,
    the holder freezes itself as soon as it settles.
    """

    # Each concrete type gets its own copy, see `__init_subclass__`
    auto_freeze: ClassVar[bool] = default_auto_freeze()

    _state: HolderState
    _producer: Optional[TProducer]
    _auto_freeze: Optional[bool]
    _frozen: bool

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if "auto_freeze" not in cls.__dict__:
            cls.auto_freeze = cls.auto_freeze

    def __init__(self, producer: Optional[TProducer], auto_freeze: Optional[bool] = None) -> None:
        self._update(
            _state=HolderState.IDLE,
            _producer=producer,
            _auto_freeze=self.__class__.auto_freeze if auto_freeze is None else auto_freeze,
            _frozen=False,
        )

    def _update(self, **fields: Any) -> None:
        # Internal transitions bypass the frozen check in `__setattr__`.
        for name, value in fields.items():
            object.__setattr__(self, name, value)

    def __setattr__(self, name: str, value: Any) -> None:
        if self.frozen:
            raise FrozenStateError(f"Can't set {name!r} on frozen {self!r}")
        super().__setattr__(name, value)

    def __delattr__(self, name: str) -> None:
        if self.frozen:
            raise FrozenStateError(f"Can't delete {name!r} on frozen {self!r}")
        super().__delattr__(name)

    def __repr__(self) -> str:
        frozen = ", frozen" if self.frozen else ""
        return f"<{self.__class__.__name__} {self.state.name.lower()}{frozen}>"

    @property
    def state(self) -> HolderState:
        return self._state

    @property
    def inited(self) -> bool:
        return self._state is HolderState.SETTLED

    @property
    def frozen(self) -> bool:
        return self.__dict__.get("_frozen", False)

    def reset(self, producer: TProducer) -> None:
        if self.frozen:
            raise FrozenStateError(f"Can't reset frozen {self!r}")
        self._discard()
        self._update(_state=HolderState.IDLE, _producer=producer)
        LOGGER.debug("Reset %r", self)

    def freeze(self) -> None:
        if self.frozen:
            return
        self._update(_auto_freeze=None, _frozen=True)
        LOGGER.debug("Froze %r", self)

    def _discard(self) -> None:
        """Drop whatever the holder cached for the previous producer"""

    def _mark_settled(self) -> None:
        self._update(_state=HolderState.SETTLED, _producer=None)
        LOGGER.debug("Settled %r", self)
        if self._auto_freeze:
            self.freeze()


__all__ = [
    "FrozenStateError",
    "HolderError",
    "HolderState",
    "LazyHolder",
    "ReentrantInitError",
    "ResetWhilePendingError",
]
