"""
Purely Matching Package
=======================

The first-match-wins engine and the fluent ``match`` builder.
"""

from .chain import MatchChain, match
from .engine import Arm, MatchMode, MatchResult, evaluate, matches, narrow

__all__ = [
    "Arm",
    "MatchChain",
    "MatchMode",
    "MatchResult",
    "evaluate",
    "match",
    "matches",
    "narrow",
]
