from __future__ import annotations

from typing import Optional

from lazyinit.base import HolderState, LazyHolder


class NullHolder(LazyHolder[None]):
    """Holder without a value: initialization is only a state flip"""

    def __init__(self, auto_freeze: Optional[bool] = None) -> None:
        super().__init__(None, auto_freeze)

    def init(self) -> bool:
        """
        >>> holder = NullHolder()
        >>> holder.init(), holder.init()
        (True, False)
        """
        if self._state is HolderState.SETTLED:
            return False
        self._mark_settled()
        return True

    @property
    def value(self) -> None:
        self.init()

    def reset(self) -> None:  # type: ignore[override]
        super().reset(None)
