"""
Purely Pattern Compiler
=======================

Turns a declared pattern into a normalized predicate, recursively.

A pattern is one of:

- a primitive literal (``str``, ``bytes``, ``bool``, numbers, enum members),
  compiled to strict equality
- a partial object shape (any ``Mapping``), compiled key by key
- a partial array shape (``list`` or ``tuple``), compiled index by index
- a ``Predicate``, used as is
- any object with a callable ``test`` attribute, wrapped as ``Custom``

Compilation is total over valid patterns and has no side effects. Anything
else raises ``PatternError`` immediately, so a pattern stored for reuse has
already been validated when it is declared.

Example:
    ```python
    from purely import compile_pattern, string

    compiled = compile_pattern({"name": {"first": string}})
    compiled.test({"name": {"first": "johnny", "last": "bravo"}})  # True
    compiled.test({"name": {"first": 42}})                         # False
    str(compiled.narrowed_type)  # "{'name': {'first': str, ...}, ...}"
    ```
"""

import numbers
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic

import numpy as np

from ..errors import PatternError
from ..types.common_types import MISSING, T
from ..types.type_tag import TypeTag
from .predicates import ArrayShape, Custom, Literal, ObjectShape, Predicate

_LITERAL_TYPES = (str, bytes, bool, np.bool_, numbers.Number, Enum)


@dataclass(frozen=True, eq=False)
class CompiledPattern(Generic[T]):
    """
    A validated pattern: the original declaration plus its predicate.

    Attributes:
        source: The pattern exactly as the caller declared it
        predicate: The normalized predicate tree
    """

    source: Any
    predicate: Predicate[T]

    def test(self, value: Any) -> bool:
        return self.predicate.test(value)

    @property
    def narrowed_type(self) -> TypeTag:
        return self.predicate.narrowed_type

    def __call__(self, value: Any) -> bool:
        return self.predicate.test(value)


def compile_pattern(pattern: Any) -> CompiledPattern:
    """
    Compile a pattern into a ``CompiledPattern``.

    Already compiled patterns are returned unchanged.

    Raises:
        PatternError: If the pattern, or any pattern nested inside it, is
            neither a literal, a shape nor a predicate.
    """
    if isinstance(pattern, CompiledPattern):
        return pattern
    return CompiledPattern(pattern, to_predicate(pattern))


def to_predicate(pattern: Any) -> Predicate:
    """Normalize a pattern into a predicate tree."""
    return _compile(pattern, path="pattern")


def _compile(pattern: Any, path: str) -> Predicate:
    if isinstance(pattern, Predicate):
        return pattern
    if isinstance(pattern, CompiledPattern):
        return pattern.predicate
    if pattern is None or pattern is MISSING:
        raise PatternError(
            f"{path}: None is not a literal pattern; use the 'nothing' predicate "
            "to match absent values",
            pattern,
        )
    if isinstance(pattern, _LITERAL_TYPES):
        return Literal(pattern)
    if isinstance(pattern, Mapping):
        return ObjectShape(
            tuple(
                (key, _compile(sub_pattern, f"{path}[{key!r}]"))
                for key, sub_pattern in pattern.items()
            )
        )
    if isinstance(pattern, (list, tuple)):
        return ArrayShape(
            tuple(
                _compile(sub_pattern, f"{path}[{index}]")
                for index, sub_pattern in enumerate(pattern)
            )
        )
    test = getattr(pattern, "test", None)
    if callable(test):
        return _wrap_custom(pattern, test)
    if callable(pattern):
        raise PatternError(
            f"{path}: bare callables are not patterns; wrap them with custom()",
            pattern,
        )
    raise PatternError(
        f"{path}: {type(pattern).__name__} is neither a literal, a shape "
        "nor a predicate",
        pattern,
    )


def _wrap_custom(source: Any, test: Any) -> Custom:
    """Adopt a ``{test}``-shaped object as a ``Custom`` predicate."""
    tag = getattr(source, "narrowed_type", None)
    if not isinstance(tag, TypeTag):
        tag = None
    name = getattr(source, "name", "")
    if not isinstance(name, str):
        name = ""
    return Custom(test, name=name, tag=tag)
