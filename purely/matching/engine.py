"""
Purely Match Engine - First-Match-Wins Evaluation
=================================================

Evaluates one subject against an ordered list of arms and fires at most
one handler. Arms are tried strictly in declaration order; the first arm
whose pattern (and optional guard) accepts the subject wins and no later
arm is evaluated.

Three modes decide what happens when nothing matched and no fallback is
declared:

- ``MatchMode.VALUE``: the subject itself is the result
- ``MatchMode.CERTAIN``: no handler fires; the result reports that
- ``MatchMode.EXHAUSTIVE``: ``NoMatchError`` is raised

A miss is a normal outcome in the first two modes, never an exception.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional, Sequence

from ..errors import NoMatchError
from ..pattern.compiler import CompiledPattern, compile_pattern
from ..types.common_types import NO_MATCH, Handler


class MatchMode(Enum):
    VALUE = "value"
    CERTAIN = "certain"
    EXHAUSTIVE = "exhaustive"


@dataclass(frozen=True)
class Arm:
    """
    One ``(pattern, handler)`` pair of a match chain.

    The pattern is compiled when the arm is built, so ``PatternError``
    surfaces at declaration time.
    """

    pattern: CompiledPattern
    handler: Handler
    guard: Optional[Callable[[Any], Any]] = None

    @classmethod
    def of(
        cls,
        pattern: Any,
        handler: Handler,
        guard: Optional[Callable[[Any], Any]] = None,
    ) -> "Arm":
        if not callable(handler):
            raise TypeError(f"Arm handler must be callable, got {handler!r}")
        if guard is not None and not callable(guard):
            raise TypeError(f"Arm guard must be callable, got {guard!r}")
        return cls(compile_pattern(pattern), handler, guard)

    def accepts(self, subject: Any) -> bool:
        if not self.pattern.test(subject):
            return False
        return self.guard is None or bool(self.guard(subject))


@dataclass(frozen=True)
class MatchResult:
    """
    Outcome of ``evaluate``.

    Attributes:
        value: Handler return value, or the subject when nothing fired
        fired: Whether an arm or the fallback handler ran
        arm_index: Index of the winning arm, None for fallback or miss
    """

    value: Any
    fired: bool
    arm_index: Optional[int] = None

    @property
    def matched(self) -> bool:
        return self.arm_index is not None


def evaluate(
    subject: Any,
    arms: Sequence[Arm],
    fallback: Optional[Handler] = None,
    mode: MatchMode = MatchMode.VALUE,
) -> MatchResult:
    """
    Run ``subject`` through ``arms`` in order and fire at most one handler.

    The winning handler receives the subject unchanged; only its documented
    type (``arm.pattern.narrowed_type``) is narrower.

    Raises:
        NoMatchError: In ``EXHAUSTIVE`` mode when no arm matched and no
            fallback was given.
    """
    for index, arm in enumerate(arms):
        if arm.accepts(subject):
            return MatchResult(arm.handler(subject), True, index)

    if fallback is not None:
        return MatchResult(fallback(subject), True)
    if mode is MatchMode.EXHAUSTIVE:
        raise NoMatchError(subject)
    return MatchResult(subject, False)


def matches(pattern: Any, subject: Any) -> bool:
    """Single-pattern check: does ``subject`` match ``pattern``?"""
    return compile_pattern(pattern).test(subject)


def narrow(pattern: Any, subject: Any) -> Any:
    """
    Return ``subject`` when it matches ``pattern``, ``NO_MATCH`` otherwise.

    ``NO_MATCH`` is falsy, but so are many subjects; compare with ``is``.
    """
    if compile_pattern(pattern).test(subject):
        return subject
    return NO_MATCH
