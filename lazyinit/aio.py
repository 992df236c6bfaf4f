from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Generator, Generic, Optional, TypeVar

from lazyinit.base import HolderState, LazyHolder, ResetWhilePendingError

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


async def _run_producer(producer: Callable[[], Awaitable[T]]) -> T:
    # Also turns a producer that raises before returning an awaitable into a failed task.
    return await producer()


def _always_true(_: Any) -> bool:
    return True


def _identity(value: T) -> T:
    return value


class AsyncHolder(LazyHolder[Callable[[], Awaitable[T]]], Generic[T]):
    """
    Compute a value asynchronously on first request and cache it.

    However many callers ask for the value while it is being computed,
    the producer runs once: the first request starts it as a task, later
    ones queue up, and every queued caller gets the same outcome in the
    order it asked. A failure is delivered to all of them and leaves the
    producer in place, so the next request retries it.

    `reset` while the computation is in flight fails the queued callers
    with `ResetWhilePendingError`; the replaced computation still runs to
    completion but its outcome is dropped.
    """

    _value: Optional[T]
    _waiters: list[tuple[asyncio.Future, Callable[[T], Any]]]
    _task: Optional[asyncio.Task]
    _running_tasks: set[asyncio.Task]

    def __init__(self, producer: Callable[[], Awaitable[T]], auto_freeze: Optional[bool] = None) -> None:
        super().__init__(producer, auto_freeze)
        self._update(_value=None, _waiters=[], _task=None, _running_tasks=set())

    def __await__(self) -> Generator[Any, None, T]:
        return self.value().__await__()

    @property
    def initing(self) -> bool:
        return self._state is HolderState.IN_FLIGHT

    @property
    def value_sync(self) -> Optional[T]:
        """Cached value, or `None` (after starting the computation in the background) when not settled yet"""
        if self._state is HolderState.SETTLED:
            return self._value
        if self._state is HolderState.IDLE:
            self._start()
        return None

    def value(self) -> asyncio.Future[T]:
        if self._state is HolderState.SETTLED:
            return self._completed(self._value)
        return self._enqueue(_identity)

    def init(self) -> asyncio.Future[bool]:
        """Resolves to `True` once the value settles, or to `False` right away if it already has"""
        if self._state is HolderState.SETTLED:
            return self._completed(False)
        return self._enqueue(_always_true)

    @staticmethod
    def _completed(result: Any) -> asyncio.Future:
        future = asyncio.get_running_loop().create_future()
        future.set_result(result)
        return future

    def _enqueue(self, on_value: Callable[[T], Any]) -> asyncio.Future:
        waiter = asyncio.get_running_loop().create_future()
        self._waiters.append((waiter, on_value))
        if self._state is HolderState.IDLE:
            self._start()
        return waiter

    def _start(self) -> None:
        producer = self._producer
        assert producer is not None
        task = asyncio.get_running_loop().create_task(_run_producer(producer))
        self._update(_state=HolderState.IN_FLIGHT, _task=task)
        # The loop only keeps weak references to tasks.
        self._running_tasks.add(task)
        task.add_done_callback(self._running_tasks.discard)
        task.add_done_callback(self._on_task_done)
        LOGGER.debug("Initializing %r", self)

    def _on_task_done(self, task: asyncio.Task) -> None:
        if task is not self._task:
            if not task.cancelled() and task.exception() is not None:
                LOGGER.debug("Dropped failure of replaced computation of %r", self, exc_info=task.exception())
            return

        waiters = self._waiters
        self._update(_task=None, _waiters=[])

        if task.cancelled():
            self._update(_state=HolderState.IDLE)
            LOGGER.debug("Initialization of %r was cancelled", self)
            for waiter, _ in waiters:
                waiter.cancel()
            return

        exc = task.exception()
        if exc is not None:
            self._update(_state=HolderState.IDLE)
            if waiters:
                LOGGER.debug("Producer of %r failed", self, exc_info=exc)
            else:
                LOGGER.warning("Producer of %r failed with nobody waiting", self, exc_info=exc)
            for waiter, _ in waiters:
                if not waiter.done():
                    waiter.set_exception(exc)
            return

        value = task.result()
        self._update(_value=value)
        for waiter, on_value in waiters:
            if not waiter.done():
                waiter.set_result(on_value(value))
        self._mark_settled()

    def _discard(self) -> None:
        waiters = self._waiters
        self._update(_value=None, _task=None, _waiters=[])
        for waiter, _ in waiters:
            if not waiter.done():
                waiter.set_exception(ResetWhilePendingError(f"{self!r} was reset before its value settled"))
