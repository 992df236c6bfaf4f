from __future__ import annotations

import contextlib
import logging
import os
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator

    from lazyinit.base import LazyHolder

LOGGER = logging.getLogger(__name__)

AUTO_FREEZE_ENV = "LAZYINIT_AUTO_FREEZE"


def parse_bool(value: str) -> bool:
    if value in ("true", "True", "TRUE"):
        return True
    if value in ("false", "False", "FALSE"):
        return False
    raise ValueError(f"Not a valid bool: {value!r}; must be `true` or `false`")


def default_auto_freeze() -> bool:
    """Process-wide auto-freeze default, `True` unless overridden through the environment"""
    raw_value = os.environ.get(AUTO_FREEZE_ENV)
    if raw_value is None:
        return True
    try:
        return parse_bool(raw_value)
    except ValueError as exc:
        raise ValueError(f"Invalid {AUTO_FREEZE_ENV} value") from exc


@contextlib.contextmanager
def override_auto_freeze(holder_cls: type[LazyHolder], auto_freeze: bool) -> Iterator[None]:
    """
    Temporarily change the auto-freeze default of `holder_cls`.

    Only instances constructed inside the block see the new default;
    holders keep the policy they captured at construction.

    >>> from lazyinit import SyncHolder
    >>> with override_auto_freeze(SyncHolder, False):
    ...     holder = SyncHolder(lambda: 1)
    >>> holder.value, holder.frozen
    (1, False)
    """
    original = holder_cls.auto_freeze
    holder_cls.auto_freeze = auto_freeze
    LOGGER.debug("Auto-freeze default of %s set to %s", holder_cls.__name__, auto_freeze)
    try:
        yield
    finally:
        holder_cls.auto_freeze = original
