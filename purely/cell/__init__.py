"""
Purely Cell Package
===================

Guarded mutation cells and the schedulers that define their turns.
"""

from .mutable import MutationCell, WriteMode, Writer, make_cell
from .scheduler import (
    AsyncioScheduler,
    Scheduler,
    TurnScheduler,
    get_default_scheduler,
    set_default_scheduler,
)

__all__ = [
    "AsyncioScheduler",
    "MutationCell",
    "Scheduler",
    "TurnScheduler",
    "WriteMode",
    "Writer",
    "get_default_scheduler",
    "make_cell",
    "set_default_scheduler",
]
