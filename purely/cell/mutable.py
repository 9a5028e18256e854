"""
Purely Mutable - Guarded Mutation Cells
=======================================

A mutation cell owns one value slot and exposes it only through two
capabilities: ``read(handler)`` and a ``Writer``. The slot is replaced
wholesale on every write and never handed out by reference; readers and
updaters receive snapshots.

Guarantees:

- **Read isolation**: a running ``read`` keeps seeing the snapshot it
  started with, even after a write inside it. Reads nested inside a
  running read see that same snapshot. Only a read started afterwards
  observes the new value.
- **No synchronous write** (guard 1): writing during the scheduler turn
  that constructed the cell raises ``SynchronousWriteError``.
- **At most one write per turn** (guard 2): whichever writer a turn uses,
  the top-level one or those handed to its read handlers, only the first
  write of that scheduler turn is applied. Later writes raise
  ``DuplicateWriteError`` (strict) or are ignored (tolerant), and the
  caller picks the variant on every call.

Example:
    ```python
    from purely import TurnScheduler, make_cell

    scheduler = TurnScheduler()
    read, write = make_cell(100, scheduler=scheduler)

    def turn_one():
        read(lambda value: print(value))   # 100
        write(lambda current: current + 1)

    scheduler.schedule(turn_one)
    scheduler.schedule(lambda: read(lambda value: print(value)))  # 101
    scheduler.run_pending()
    ```
"""

import copy
import inspect
import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Generic, Optional, Tuple

from ..errors import DuplicateWriteError, SynchronousWriteError
from ..types.common_types import MISSING, Handler, T, Updater
from .scheduler import Scheduler, get_default_scheduler

Snapshot = Callable[[Any], Any]


class WriteMode(Enum):
    """How a write reacts to an already applied write in the same turn."""

    STRICT = "strict"  # raise DuplicateWriteError
    TOLERANT = "tolerant"  # ignore the write


def _identity(value: Any) -> Any:
    return value


_HANDLER_ARGUMENTS = ("value", "previous", "write")


def _handler_arguments(handler: Handler) -> Tuple[int, Tuple[str, ...]]:
    """
    Decide how ``read`` calls ``handler``.

    Returns the number of ``(value, previous, write)`` passed positionally
    and the names passed by keyword. Only required positional parameters
    are filled, so ``lambda value, label=label: ...`` keeps its default.
    """
    try:
        sig = inspect.signature(handler)
    except (TypeError, ValueError):
        return 1, ()

    positional = 0
    keywords = []
    for param in sig.parameters.values():
        if param.kind is inspect.Parameter.VAR_POSITIONAL:
            positional = len(_HANDLER_ARGUMENTS)
        elif param.kind in (
            inspect.Parameter.POSITIONAL_ONLY,
            inspect.Parameter.POSITIONAL_OR_KEYWORD,
        ):
            if param.default is inspect.Parameter.empty:
                positional += 1
        elif param.kind is inspect.Parameter.KEYWORD_ONLY:
            if param.name in _HANDLER_ARGUMENTS:
                keywords.append(param.name)
    return min(positional, len(_HANDLER_ARGUMENTS)), tuple(keywords)


# ============================================================================
# WRITER CAPABILITY
# ============================================================================


class Writer:
    """
    Write capability of a cell, limited to one write per scheduler turn.

    Calling the writer performs a strict write. ``tolerant`` ignores a write
    when the turn was already written, and ``write`` takes the mode
    explicitly. Each returns True when the update was applied.
    """

    __slots__ = ("_cell",)

    def __init__(self, cell: "MutationCell"):
        self._cell = cell

    def __call__(self, updater: Updater) -> bool:
        return self._cell._apply(updater, WriteMode.STRICT)

    def strict(self, updater: Updater) -> bool:
        return self._cell._apply(updater, WriteMode.STRICT)

    def tolerant(self, updater: Updater) -> bool:
        return self._cell._apply(updater, WriteMode.TOLERANT)

    def write(self, updater: Updater, mode: WriteMode = WriteMode.STRICT) -> bool:
        return self._cell._apply(updater, mode)

    def __repr__(self) -> str:
        return f"Writer(version={self._cell.version})"


@dataclass(frozen=True)
class _ReadFrame:
    value: Any
    previous: Any


# ============================================================================
# MUTATION CELL
# ============================================================================


class MutationCell(Generic[T]):
    """
    Single-slot, versioned value cell with read and write guards.

    Args:
        initial: Initial slot value
        scheduler: Turn source for guard 1; the thread's default scheduler
            when omitted
        snapshot: Function producing the copy handed to readers and stored
            on writes. ``copy.deepcopy`` by default; pass None when values
            are immutable.
    """

    def __init__(
        self,
        initial: T,
        scheduler: Optional[Scheduler] = None,
        snapshot: Optional[Snapshot] = copy.deepcopy,
    ) -> None:
        self._scheduler = scheduler if scheduler is not None else get_default_scheduler()
        self._snapshot = snapshot if snapshot is not None else _identity
        self._lock = threading.RLock()

        self._slot = self._snapshot(initial)
        self._previous: Any = MISSING
        self._version = 0

        self._created_turn = self._scheduler.turn
        self._seen_turn = self._created_turn
        self._turn_baseline = 0

        self._active_read: Optional[_ReadFrame] = None
        self._is_writing = False
        self._writer = Writer(self)

    @property
    def version(self) -> int:
        return self._version

    @property
    def created_turn(self) -> int:
        return self._created_turn

    @property
    def scheduler(self) -> Scheduler:
        return self._scheduler

    @property
    def writer(self) -> Writer:
        """Write capability shared by the cell's owner and its read handlers."""
        return self._writer

    def read(self, handler: Handler) -> Any:
        """
        Call ``handler`` with a snapshot of the slot and return its result.

        The handler receives as many of ``(value, previous, write)`` as it has
        required positional parameters; keyword-only parameters with those
        names are passed by keyword. ``previous`` is ``MISSING`` until the
        first write and ``write`` is the cell's ``Writer``.
        """
        # Nested reads share the running read's snapshot
        if self._active_read is not None:
            return self._invoke(handler, self._active_read)

        self._sync_turn()
        frame = _ReadFrame(
            value=self._snapshot(self._slot),
            previous=self._snapshot(self._previous),
        )
        self._active_read = frame
        try:
            return self._invoke(handler, frame)
        finally:
            self._active_read = None

    def read_later(self, handler: Handler) -> None:
        """Schedule ``read(handler)`` for a later turn."""
        self._scheduler.schedule(lambda: self.read(handler))

    def write(self, updater: Updater, mode: WriteMode = WriteMode.STRICT) -> bool:
        return self._writer.write(updater, mode)

    def _invoke(self, handler: Handler, frame: _ReadFrame) -> Any:
        positional, keywords = _handler_arguments(handler)
        available = {
            "value": frame.value,
            "previous": frame.previous,
            "write": self._writer,
        }
        args = tuple(available.values())[:positional]
        return handler(*args, **{name: available[name] for name in keywords})

    def _sync_turn(self) -> int:
        """Record the version a new turn starts from."""
        turn = self._scheduler.turn
        if turn != self._seen_turn:
            self._seen_turn = turn
            self._turn_baseline = self._version
        return turn

    def _apply(self, updater: Updater, mode: WriteMode) -> bool:
        with self._lock:
            turn = self._sync_turn()
            if turn == self._created_turn:
                raise SynchronousWriteError(turn)

            if self._is_writing or self._version != self._turn_baseline:
                if mode is WriteMode.TOLERANT:
                    logging.debug(
                        f"Ignored repeated write at version {self._version} (turn {turn})"
                    )
                    return False
                raise DuplicateWriteError(self._version)

            self._is_writing = True
            try:
                next_value = updater(self._snapshot(self._slot))
            finally:
                self._is_writing = False

            self._previous = self._slot
            self._slot = self._snapshot(next_value)
            self._version += 1
            logging.debug(f"Cell written: version {self._version} (turn {turn})")
            return True

    def __repr__(self) -> str:
        return (
            f"MutationCell(version={self._version}, "
            f"created_turn={self._created_turn})"
        )


def make_cell(
    initial: T,
    scheduler: Optional[Scheduler] = None,
    snapshot: Optional[Snapshot] = copy.deepcopy,
) -> Tuple[Callable[[Handler], Any], Writer]:
    """
    Create a cell and return its ``(read, write)`` capability pair.

    Nothing else in the returned pair gives access to the slot.
    """
    cell = MutationCell(initial, scheduler=scheduler, snapshot=snapshot)
    return cell.read, cell.writer
