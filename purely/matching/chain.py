"""
Purely Match Chain - Fluent Match Builder
=========================================

``match(subject)`` starts a chain bound to one subject. Arms are added with
``with_`` (``with`` is a Python keyword) and a terminal operation runs the
evaluation:

- ``done()``: value-returning; the subject comes back when nothing matched
- ``otherwise(handler)``: value-returning with a fallback handler
- ``fire(fallback=None)``: certainty mode; runs at most one handler and
  reports whether one ran
- ``exhaustive()``: raises ``NoMatchError`` when no arm matched

A chain is consumed by its terminal operation and cannot be reused.

Example:
    ```python
    from purely import match

    greeting = (
        match("odie")
        .with_("garfield", lambda cat: "lasagna")
        .with_("odie", lambda dog: "slobber")
        .otherwise(lambda other: "who?")
    )
    # greeting == "slobber"
    ```
"""

from typing import Any, Callable, List, Optional

from ..errors import ChainConsumedError
from ..types.common_types import Handler
from .engine import Arm, MatchMode, MatchResult, evaluate


class MatchChain:
    """
    Builder accumulating arms for one subject.

    Patterns are compiled as arms are added; ``PatternError`` is raised by
    ``with_`` rather than by the terminal operation.
    """

    __slots__ = ("subject", "_arms", "_consumed")

    def __init__(self, subject: Any):
        self.subject = subject
        self._arms: List[Arm] = []
        self._consumed = False

    def with_(
        self,
        pattern: Any,
        handler: Handler,
        guard: Optional[Callable[[Any], Any]] = None,
    ) -> "MatchChain":
        """
        Add an arm and return self for chaining.

        Args:
            pattern: Literal, partial shape or predicate
            handler: Called with the subject when this arm wins
            guard: Extra ``subject -> bool`` condition the arm also requires
        """
        self._check_open()
        self._arms.append(Arm.of(pattern, handler, guard))
        return self

    def done(self) -> Any:
        return self._run(None, MatchMode.VALUE).value

    def otherwise(self, handler: Handler) -> Any:
        if not callable(handler):
            raise TypeError(f"Fallback handler must be callable, got {handler!r}")
        return self._run(handler, MatchMode.VALUE).value

    def fire(self, fallback: Optional[Handler] = None) -> bool:
        return self._run(fallback, MatchMode.CERTAIN).fired

    def exhaustive(self) -> Any:
        return self._run(None, MatchMode.EXHAUSTIVE).value

    @property
    def arms(self) -> tuple:
        return tuple(self._arms)

    @property
    def consumed(self) -> bool:
        return self._consumed

    def _run(self, fallback: Optional[Handler], mode: MatchMode) -> MatchResult:
        self._check_open()
        self._consumed = True
        return evaluate(self.subject, self._arms, fallback, mode)

    def _check_open(self) -> None:
        if self._consumed:
            raise ChainConsumedError("Match chain was already evaluated")

    def __repr__(self) -> str:
        state = "consumed" if self._consumed else "open"
        return f"MatchChain({self.subject!r}, arms={len(self._arms)}, {state})"


def match(subject: Any) -> MatchChain:
    """Start a match chain for ``subject``."""
    return MatchChain(subject)
