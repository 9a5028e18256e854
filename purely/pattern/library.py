"""
Purely Predicate Library - Predicate Constructors
=================================================

Ready-made predicates and the combinators that build new ones. Every
combinator accepts any pattern (literals and shapes included) and
compiles its children eagerly, so a malformed child raises
``PatternError`` where the predicate is declared.

Example:
    ```python
    from purely import array_of, number, optional, string, union

    user = {"name": string, "age": optional(number), "tags": array_of(string)}
    identifier = union(string, number)     # same as string | number
    ```
"""

import numbers
from typing import Any, Callable, Optional, Type

from ..errors import PatternError
from ..types.type_tag import TypeTag
from .compiler import _wrap_custom, to_predicate
from .predicates import (
    BOOLEAN_PREDICATE,
    INTEGER_PREDICATE,
    NOTHING_PREDICATE,
    NUMBER_PREDICATE,
    STRING_PREDICATE,
    UNKNOWN_PREDICATE,
    AllOf,
    ArrayOf,
    Comparison,
    ComparisonOp,
    Custom,
    InstanceOf,
    Literal,
    Predicate,
    RecordOf,
    Union,
    is_boolean,
)

# ============================================================================
# PRIMITIVE CHECKS
# ============================================================================

string = STRING_PREDICATE
number = NUMBER_PREDICATE
integer = INTEGER_PREDICATE
boolean = BOOLEAN_PREDICATE

# Matches only None and MISSING (absent key, index past the end)
nothing = NOTHING_PREDICATE

# Matches everything, absent values included
unknown = UNKNOWN_PREDICATE

# ============================================================================
# COMBINATORS
# ============================================================================


def array_of(element: Any) -> Predicate:
    """Sequences (and numpy arrays) whose every element matches ``element``."""
    return ArrayOf(to_predicate(element))


def record_of(value: Any) -> Predicate:
    """Mappings whose every value matches ``value``; keys are unconstrained."""
    return RecordOf(to_predicate(value))


def union(*patterns: Any) -> Predicate:
    """
    Match when any member matches.

    Nested unions are flattened, so ``union(a, union(b, c))`` has three
    members.
    """
    if not patterns:
        raise PatternError("union() needs at least one member")
    members = []
    for pattern in patterns:
        predicate = to_predicate(pattern)
        if isinstance(predicate, Union):
            members.extend(predicate.members)
        else:
            members.append(predicate)
    return Union(tuple(members))


def all_of(*patterns: Any) -> Predicate:
    """Match when every member matches (intersection)."""
    if not patterns:
        raise PatternError("all_of() needs at least one member")
    members = []
    for pattern in patterns:
        predicate = to_predicate(pattern)
        if isinstance(predicate, AllOf):
            members.extend(predicate.members)
        else:
            members.append(predicate)
    return AllOf(tuple(members))


def optional(pattern: Any) -> Predicate:
    """``pattern`` or nothing."""
    return union(pattern, nothing)


def literal(value: Any) -> Predicate:
    predicate = to_predicate(value)
    if not isinstance(predicate, Literal):
        raise PatternError(f"literal() expects a primitive value, got {value!r}", value)
    return predicate


def one_of(*values: Any) -> Predicate:
    """Union of literals: ``one_of("garfield", "odie")``."""
    return union(*(literal(value) for value in values))


def instance_of(*classes: Type) -> Predicate:
    if not classes or not all(isinstance(cls, type) for cls in classes):
        raise PatternError("instance_of() expects one or more classes", classes)
    return InstanceOf(tuple(classes))


# ============================================================================
# COMPARISONS
# ============================================================================


def _comparison(op: ComparisonOp, bound: Any) -> Predicate:
    if not isinstance(bound, numbers.Real) or is_boolean(bound):
        raise PatternError(f"Comparison bound must be a number, got {bound!r}", bound)
    return Comparison(op, bound)


def lt(bound: Any) -> Predicate:
    return _comparison(ComparisonOp.LT, bound)


def gt(bound: Any) -> Predicate:
    return _comparison(ComparisonOp.GT, bound)


def lte(bound: Any) -> Predicate:
    return _comparison(ComparisonOp.LTE, bound)


def gte(bound: Any) -> Predicate:
    return _comparison(ComparisonOp.GTE, bound)


def between(low: Any, high: Any) -> Predicate:
    """Inclusive numeric range."""
    lower, upper = gte(low), lte(high)
    if low > high:
        raise PatternError(f"between() bounds are reversed: {low!r} > {high!r}")
    return all_of(lower, upper)


# ============================================================================
# CUSTOM PREDICATES
# ============================================================================


def custom(
    check: Any,
    name: str = "",
    narrowed_type: Optional[TypeTag] = None,
) -> Predicate:
    """
    Build a predicate from caller code.

    ``check`` may be a plain callable or any object exposing a callable
    ``test`` attribute. The result composes with the built-in predicates
    exactly like they do.

    Args:
        check: ``value -> bool`` callable or ``{test}``-shaped object
        name: Label used for the narrowed type
        narrowed_type: Explicit narrowed type, overriding ``name``

    Example:
        ```python
        even = custom(lambda n: n % 2 == 0, name="even")
        evens = array_of(number & even)
        ```
    """
    if isinstance(check, Predicate):
        return check
    test = getattr(check, "test", None)
    if callable(test):
        adopted = _wrap_custom(check, test)
        return Custom(
            adopted.check,
            name=name or adopted.name,
            tag=narrowed_type or adopted.tag,
        )
    if callable(check):
        return Custom(
            check,
            name=name or getattr(check, "__name__", "").replace("<lambda>", ""),
            tag=narrowed_type,
        )
    raise PatternError(
        f"custom() expects a callable or an object with a test method, got {check!r}",
        check,
    )


def predicate(name: str = "", narrowed_type: Optional[TypeTag] = None) -> Callable:
    """
    Decorator form of ``custom``.

    Example:
        ```python
        @predicate(name="email")
        def email(value):
            return isinstance(value, str) and "@" in value
        ```
    """

    def decorator(func: Callable[[Any], Any]) -> Predicate:
        return custom(func, name=name, narrowed_type=narrowed_type)

    return decorator
