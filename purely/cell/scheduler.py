"""
Purely Scheduler - Turn Boundaries for Mutation Cells
=====================================================

A mutation cell needs one thing from its host: a way to tell whether code
runs in the same synchronous turn that created the cell. Schedulers provide
that as an epoch counter, ``turn``, that advances every time a deferred
callback starts. No timers, no wall-clock time: crossing any scheduler
boundary counts.

Implementations:

- ``TurnScheduler``: an explicit FIFO queue drained with ``run_pending()``.
  Deterministic, so it is the default and what tests use.
- ``AsyncioScheduler``: defers callbacks with ``loop.call_soon`` and also
  treats every event loop iteration as a turn of its own.

The default scheduler is thread-local, like the library's other contexts.
"""

import asyncio
import logging
import threading
from collections import deque
from typing import Any, Callable, Deque, Optional, Protocol, runtime_checkable

Callback = Callable[[], Any]

# ============================================================================
# SCHEDULER PROTOCOL
# ============================================================================


@runtime_checkable
class Scheduler(Protocol):
    """
    Protocol for the deferred-execution collaborator.

    ``schedule`` must never run the callback before the current turn ends,
    and ``turn`` must change whenever a scheduled callback starts.
    Callbacks run in the order they were scheduled.
    """

    @property
    def turn(self) -> int:
        ...

    def schedule(self, callback: Callback) -> None:
        ...


# ============================================================================
# TURN SCHEDULER
# ============================================================================


class TurnScheduler:
    """
    Manual FIFO scheduler.

    Callbacks queue up until ``run_pending()`` drains them, each in a turn of
    its own. Callbacks scheduled while draining run in the same drain, after
    the ones already queued.

    Example:
        ```python
        scheduler = TurnScheduler()
        scheduler.schedule(lambda: print("later"))
        scheduler.run_pending()  # prints "later"
        ```
    """

    def __init__(self) -> None:
        self._turn = 0
        self._pending: Deque[Callback] = deque()
        self._is_running = False

    @property
    def turn(self) -> int:
        return self._turn

    @property
    def pending(self) -> int:
        return len(self._pending)

    def schedule(self, callback: Callback) -> None:
        if not callable(callback):
            raise TypeError(f"Scheduled callback must be callable, got {callback!r}")
        self._pending.append(callback)

    def run_pending(self) -> int:
        """
        Run queued callbacks until the queue is empty.

        Returns:
            Number of callbacks run. A nested call from inside a callback
            returns 0 and leaves the queue to the outer drain.

        Exceptions raised by a callback propagate; callbacks still queued
        stay queued for the next drain.
        """
        # Prevent re-entrance
        if self._is_running:
            return 0

        self._is_running = True
        count = 0
        try:
            while self._pending:
                callback = self._pending.popleft()
                self._turn += 1
                count += 1
                logging.debug(f"Scheduler turn {self._turn} started")
                callback()
        finally:
            self._is_running = False
            # Code after the drain is a turn of its own
            self._turn += 1
        return count

    def __repr__(self) -> str:
        return f"TurnScheduler(turn={self._turn}, pending={len(self._pending)})"


# ============================================================================
# ASYNCIO SCHEDULER
# ============================================================================


class AsyncioScheduler:
    """
    Scheduler backed by an asyncio event loop.

    Each callback passed to ``schedule`` runs via ``loop.call_soon`` in a
    new turn. Code resumed by the loop in any other way (``await
    asyncio.sleep(...)``, I/O, other tasks) is in a new turn too: reading
    ``turn`` arms a tick for the next loop iteration, and the tick advances
    the counter. Callbacks the loop queued before that tick still see the
    old turn, so they may be refused a write they could have made, never
    granted one they could not.
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self._loop = loop
        self._turn = 0
        self._tick_armed = False

    @property
    def turn(self) -> int:
        self._arm_tick()
        return self._turn

    def schedule(self, callback: Callback) -> None:
        if not callable(callback):
            raise TypeError(f"Scheduled callback must be callable, got {callback!r}")
        self._get_loop().call_soon(self._run, callback)

    async def next_turn(self) -> int:
        """Suspend until a scheduled turn has started; return that turn."""
        future = self._get_loop().create_future()

        def resolve() -> None:
            if not future.done():
                future.set_result(self._turn)

        self.schedule(resolve)
        return await future

    def _run(self, callback: Callback) -> None:
        self._turn += 1
        logging.debug(f"Scheduler turn {self._turn} started")
        callback()

    def _arm_tick(self) -> None:
        if self._tick_armed:
            return
        try:
            self._get_loop().call_soon(self._tick)
        except RuntimeError:
            # No running loop, so no later iteration to wait for
            return
        self._tick_armed = True

    def _tick(self) -> None:
        self._tick_armed = False
        self._turn += 1

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is not None:
            return self._loop
        return asyncio.get_running_loop()

    def __repr__(self) -> str:
        return f"AsyncioScheduler(turn={self._turn})"


# ============================================================================
# DEFAULT SCHEDULER
# ============================================================================

_local = threading.local()


def get_default_scheduler() -> Scheduler:
    """Return this thread's default scheduler, creating a ``TurnScheduler``."""
    scheduler = getattr(_local, "scheduler", None)
    if scheduler is None:
        scheduler = TurnScheduler()
        _local.scheduler = scheduler
    return scheduler


def set_default_scheduler(scheduler: Scheduler) -> None:
    if not isinstance(scheduler, Scheduler):
        raise TypeError(f"{scheduler!r} does not implement the Scheduler protocol")
    _local.scheduler = scheduler


def _reset_default_scheduler() -> None:
    """Reset the thread's default scheduler for testing."""
    _local.__dict__.clear()
