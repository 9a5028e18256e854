"""Shared types for Purely."""

from .common_types import MISSING, NO_MATCH, Handler, T, U, Updater
from .type_tag import TypeTag

__all__ = ["MISSING", "NO_MATCH", "Handler", "T", "TypeTag", "U", "Updater"]
