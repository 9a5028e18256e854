"""
Purely Common Types - Shared Type Definitions
=============================================

Shared type variables, callable aliases and sentinel values used across
the pattern, matching and cell packages. Keeping them here avoids
circular imports between those packages.
"""

from typing import Any, Callable, TypeVar

# ============================================================================
# TYPE VARIABLES
# ============================================================================

T = TypeVar("T")
U = TypeVar("U")

# ============================================================================
# CALLABLE TYPES
# ============================================================================

Handler = Callable[..., Any]
Updater = Callable[[T], T]

# ============================================================================
# SENTINEL VALUES
# ============================================================================


class _Missing:
    """Sentinel for a value that is absent rather than ``None``."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return "MISSING"

    def __bool__(self):
        return False

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self


class _NoMatch:
    """Sentinel returned by ``narrow`` when the pattern rejects the subject."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return "NO_MATCH"

    def __bool__(self):
        return False


# Absent key, index past the end, or no previous cell value
MISSING = _Missing()

NO_MATCH = _NoMatch()
