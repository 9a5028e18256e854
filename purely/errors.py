"""
Purely Errors - Exception Taxonomy
==================================

All failures raised by Purely derive from ``PurelyError`` so callers can
catch the library's errors in one place. Each concrete error also derives
from the closest builtin so ordinary ``except ValueError`` style handling
keeps working.

- ``PatternError``: a pattern could not be compiled (raised when the
  pattern is declared, never at match time)
- ``NoMatchError``: nothing matched in exhaustive mode
- ``SynchronousWriteError``: a cell was written in the turn that built it
- ``DuplicateWriteError``: a second strict write in the same write scope
"""

from typing import Any


class PurelyError(Exception):
    """Base class for every error raised by Purely."""


class PatternError(PurelyError, ValueError):
    """Raised when a pattern is malformed and cannot be compiled."""

    def __init__(self, message: str, pattern: Any = None):
        super().__init__(message)
        self.pattern = pattern


class NoMatchError(PurelyError, LookupError):
    """
    Raised by exhaustive matching when no arm accepted the subject.

    Value-returning matches never raise this; they hand back the subject.
    """

    def __init__(self, subject: Any):
        super().__init__(f"No pattern matched {subject!r}")
        self.subject = subject


class ChainConsumedError(PurelyError, RuntimeError):
    """Raised when a match chain is used after its terminal operation."""


class CellError(PurelyError, RuntimeError):
    """Base class for mutation cell guard violations."""


class SynchronousWriteError(CellError):
    """Raised when a cell is written during the turn that constructed it."""

    def __init__(self, turn: int):
        super().__init__(
            f"Cannot write a cell during the turn that created it (turn {turn}); "
            "schedule the write for a later turn"
        )
        self.turn = turn


class DuplicateWriteError(CellError):
    """Raised when a strict write follows an already applied write in the same scope."""

    def __init__(self, version: int):
        super().__init__(
            f"Cell already written in this turn (now at version {version}); "
            "use the tolerant write to ignore repeated writes"
        )
        self.version = version
