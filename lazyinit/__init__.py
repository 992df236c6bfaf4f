""" Deferred-value holders: null, synchronous and coalescing asynchronous """
from __future__ import annotations

from .aio import AsyncHolder
from .base import FrozenStateError, HolderError, HolderState, LazyHolder, ReentrantInitError, ResetWhilePendingError
from .config import default_auto_freeze, override_auto_freeze
from .null import NullHolder
from .sync import SyncHolder

__version__ = "1.0.0"
