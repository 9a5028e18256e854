"""
Purely Predicates - Runtime Interface Variants
==============================================

A predicate is a self-describing test over one value: it answers
``test(value) -> bool`` and documents what a passing value looks like via
``narrowed_type``. Predicates are immutable data. Combinators wrap other
predicates but never modify them.

The set of variants is closed:

- ``Literal``: strict equality with a primitive value
- ``TypeOf``: primitive type check (string, number, boolean, nothing, ...)
- ``ArrayOf``: every element of a sequence satisfies a predicate
- ``RecordOf``: every value of a mapping satisfies a predicate
- ``Union``: any member satisfies
- ``AllOf``: every member satisfies
- ``Comparison``: numeric comparison against a bound
- ``InstanceOf``: ``isinstance`` check against Python classes
- ``ObjectShape`` / ``ArrayShape``: compiled partial shapes
- ``Custom``: an opaque caller-supplied test function

Each variant implements its own ``test``, so dispatch is ordinary method
resolution and no marker attributes are inspected.
"""

import numbers
import operator
from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, ClassVar, Generic, Optional, Tuple, Type

import numpy as np

from ..types.common_types import MISSING, T
from ..types.type_tag import (
    BOOLEAN,
    INTEGER,
    NOTHING,
    NUMBER,
    STRING,
    UNKNOWN,
    TypeTag,
)

# ============================================================================
# SUBJECT INSPECTION
# ============================================================================


def is_boolean(value: Any) -> bool:
    return isinstance(value, (bool, np.bool_))


def is_number(value: Any) -> bool:
    """Real numbers, numpy scalars included, but never booleans."""
    return isinstance(value, numbers.Real) and not is_boolean(value)


def is_integer(value: Any) -> bool:
    return isinstance(value, numbers.Integral) and not is_boolean(value)


def is_nothing(value: Any) -> bool:
    return value is None or value is MISSING


def is_array_like(value: Any) -> bool:
    """Non-string sequences and numpy arrays with at least one axis."""
    if isinstance(value, np.ndarray):
        return value.ndim > 0
    return isinstance(value, Sequence) and not isinstance(
        value, (str, bytes, bytearray)
    )


def is_object_like(value: Any) -> bool:
    """
    Mappings and arbitrary objects that are neither primitives nor arrays.

    Dataclasses, namedtuples-as-objects and plain class instances are
    object-like; their string keys are resolved as attributes.
    """
    if isinstance(value, Mapping):
        return True
    if is_nothing(value) or isinstance(value, (str, bytes, bytearray)):
        return False
    # 0-d arrays are wrapped scalars, the rest are arrays
    if isinstance(value, np.ndarray):
        return False
    if is_boolean(value) or isinstance(value, numbers.Number):
        return False
    return not is_array_like(value)


def lookup_key(subject: Any, key: Any) -> Any:
    """Fetch ``subject[key]`` (or the attribute), ``MISSING`` when absent."""
    if isinstance(subject, Mapping):
        if key in subject:
            return subject[key]
        return MISSING
    if isinstance(key, str):
        return getattr(subject, key, MISSING)
    return MISSING


def lookup_index(subject: Any, index: int) -> Any:
    if index < len(subject):
        return subject[index]
    return MISSING


def strict_equals(expected: Any, actual: Any) -> bool:
    """
    Equality without cross-type coercion.

    Booleans only equal booleans, numbers compare by value across
    int/float/numpy, enum members compare by identity and everything else
    must share the expected value's type.
    """
    if is_boolean(expected) or is_boolean(actual):
        return is_boolean(expected) and is_boolean(actual) and bool(expected) == bool(actual)
    if isinstance(expected, numbers.Number):
        return isinstance(actual, numbers.Number) and bool(expected == actual)
    if isinstance(expected, Enum):
        return actual is expected
    return isinstance(actual, type(expected)) and bool(expected == actual)


# ============================================================================
# PREDICATE KINDS
# ============================================================================


class PredicateKind(Enum):
    """Discriminator for the closed set of predicate variants."""

    LITERAL = "literal"
    TYPE_OF = "type_of"
    ARRAY_OF = "array_of"
    RECORD_OF = "record_of"
    UNION = "union"
    ALL_OF = "all_of"
    COMPARISON = "comparison"
    INSTANCE_OF = "instance_of"
    OBJECT_SHAPE = "object_shape"
    ARRAY_SHAPE = "array_shape"
    CUSTOM = "custom"


class Primitive(Enum):
    STRING = "string"
    NUMBER = "number"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    NOTHING = "nothing"
    UNKNOWN = "unknown"


_PRIMITIVE_CHECKS = {
    Primitive.STRING: lambda value: isinstance(value, str),
    Primitive.NUMBER: is_number,
    Primitive.INTEGER: is_integer,
    Primitive.BOOLEAN: is_boolean,
    Primitive.NOTHING: is_nothing,
    Primitive.UNKNOWN: lambda value: True,
}

_PRIMITIVE_TAGS = {
    Primitive.STRING: STRING,
    Primitive.NUMBER: NUMBER,
    Primitive.INTEGER: INTEGER,
    Primitive.BOOLEAN: BOOLEAN,
    Primitive.NOTHING: NOTHING,
    Primitive.UNKNOWN: UNKNOWN,
}


class ComparisonOp(Enum):
    LT = "<"
    GT = ">"
    LTE = "<="
    GTE = ">="

    def apply(self, value: Any, bound: Any) -> bool:
        return bool(_OPERATORS[self](value, bound))


_OPERATORS = {
    ComparisonOp.LT: operator.lt,
    ComparisonOp.GT: operator.gt,
    ComparisonOp.LTE: operator.le,
    ComparisonOp.GTE: operator.ge,
}


# ============================================================================
# PREDICATE BASE
# ============================================================================


class Predicate(ABC, Generic[T]):
    """
    Base class for all predicate variants.

    Predicates are callable (``p(value)`` is ``p.test(value)``) and combine
    with ``|`` (union) and ``&`` (intersection). The right-hand side of an
    operator may be any pattern; it is compiled on the spot.
    """

    kind: ClassVar[PredicateKind]

    @abstractmethod
    def test(self, value: Any) -> bool:
        """Return True when ``value`` satisfies this predicate."""

    @property
    @abstractmethod
    def narrowed_type(self) -> TypeTag:
        """Describe what a value that passed ``test`` is known to be."""

    def __call__(self, value: Any) -> bool:
        return self.test(value)

    def __or__(self, other: Any) -> "Predicate":
        from .library import union

        return union(self, other)

    def __ror__(self, other: Any) -> "Predicate":
        from .library import union

        return union(other, self)

    def __and__(self, other: Any) -> "Predicate":
        from .library import all_of

        return all_of(self, other)

    def __rand__(self, other: Any) -> "Predicate":
        from .library import all_of

        return all_of(other, self)


# ============================================================================
# VARIANTS
# ============================================================================


@dataclass(frozen=True)
class Literal(Predicate[T]):
    value: Any

    kind: ClassVar[PredicateKind] = PredicateKind.LITERAL

    def test(self, value: Any) -> bool:
        return strict_equals(self.value, value)

    @property
    def narrowed_type(self) -> TypeTag:
        return TypeTag.literal(self.value)


@dataclass(frozen=True)
class TypeOf(Predicate[T]):
    primitive: Primitive

    kind: ClassVar[PredicateKind] = PredicateKind.TYPE_OF

    def test(self, value: Any) -> bool:
        return _PRIMITIVE_CHECKS[self.primitive](value)

    @property
    def narrowed_type(self) -> TypeTag:
        return _PRIMITIVE_TAGS[self.primitive]


@dataclass(frozen=True)
class ArrayOf(Predicate[T]):
    element: Predicate

    kind: ClassVar[PredicateKind] = PredicateKind.ARRAY_OF

    def test(self, value: Any) -> bool:
        if not is_array_like(value):
            return False
        return all(self.element.test(item) for item in value)

    @property
    def narrowed_type(self) -> TypeTag:
        return TypeTag.array(self.element.narrowed_type)


@dataclass(frozen=True)
class RecordOf(Predicate[T]):
    value_predicate: Predicate

    kind: ClassVar[PredicateKind] = PredicateKind.RECORD_OF

    def test(self, value: Any) -> bool:
        if not isinstance(value, Mapping):
            return False
        return all(self.value_predicate.test(item) for item in value.values())

    @property
    def narrowed_type(self) -> TypeTag:
        return TypeTag.record(self.value_predicate.narrowed_type)


@dataclass(frozen=True)
class Union(Predicate[T]):
    members: Tuple[Predicate, ...]

    kind: ClassVar[PredicateKind] = PredicateKind.UNION

    def test(self, value: Any) -> bool:
        return any(member.test(value) for member in self.members)

    @property
    def narrowed_type(self) -> TypeTag:
        return TypeTag.union(*(member.narrowed_type for member in self.members))


@dataclass(frozen=True)
class AllOf(Predicate[T]):
    members: Tuple[Predicate, ...]

    kind: ClassVar[PredicateKind] = PredicateKind.ALL_OF

    def test(self, value: Any) -> bool:
        return all(member.test(value) for member in self.members)

    @property
    def narrowed_type(self) -> TypeTag:
        return TypeTag.intersection(
            *(member.narrowed_type for member in self.members)
        )


@dataclass(frozen=True)
class Comparison(Predicate[T]):
    op: ComparisonOp
    bound: Any

    kind: ClassVar[PredicateKind] = PredicateKind.COMPARISON

    def test(self, value: Any) -> bool:
        return is_number(value) and self.op.apply(value, self.bound)

    @property
    def narrowed_type(self) -> TypeTag:
        return TypeTag.annotated(NUMBER, f"{self.op.value} {self.bound!r}")


@dataclass(frozen=True)
class InstanceOf(Predicate[T]):
    classes: Tuple[Type, ...]

    kind: ClassVar[PredicateKind] = PredicateKind.INSTANCE_OF

    def test(self, value: Any) -> bool:
        return isinstance(value, self.classes)

    @property
    def narrowed_type(self) -> TypeTag:
        return TypeTag.union(
            *(TypeTag.primitive(cls.__name__) for cls in self.classes)
        )


@dataclass(frozen=True)
class ObjectShape(Predicate[T]):
    """Partial object shape: declared keys are checked, the rest ignored."""

    fields: Tuple[Tuple[Any, Predicate], ...]

    kind: ClassVar[PredicateKind] = PredicateKind.OBJECT_SHAPE

    def test(self, value: Any) -> bool:
        if not is_object_like(value):
            return False
        return all(
            predicate.test(lookup_key(value, key)) for key, predicate in self.fields
        )

    @property
    def narrowed_type(self) -> TypeTag:
        return TypeTag.obj(
            tuple((key, predicate.narrowed_type) for key, predicate in self.fields)
        )


@dataclass(frozen=True)
class ArrayShape(Predicate[T]):
    """Partial array shape: positions past the pattern's length are ignored."""

    items: Tuple[Predicate, ...]

    kind: ClassVar[PredicateKind] = PredicateKind.ARRAY_SHAPE

    def test(self, value: Any) -> bool:
        if not is_array_like(value):
            return False
        return all(
            predicate.test(lookup_index(value, index))
            for index, predicate in enumerate(self.items)
        )

    @property
    def narrowed_type(self) -> TypeTag:
        return TypeTag.tuple_prefix(
            tuple(predicate.narrowed_type for predicate in self.items)
        )


@dataclass(frozen=True)
class Custom(Predicate[T]):
    """Caller-supplied test; the only variant holding an opaque function."""

    check: Callable[[Any], Any]
    name: str = ""
    tag: Optional[TypeTag] = None

    kind: ClassVar[PredicateKind] = PredicateKind.CUSTOM

    def test(self, value: Any) -> bool:
        return bool(self.check(value))

    @property
    def narrowed_type(self) -> TypeTag:
        if self.tag is not None:
            return self.tag
        if self.name:
            return TypeTag.primitive(self.name)
        return UNKNOWN


# Singletons for the parameterless primitive checks
STRING_PREDICATE: Predicate[str] = TypeOf(Primitive.STRING)
NUMBER_PREDICATE: Predicate[float] = TypeOf(Primitive.NUMBER)
INTEGER_PREDICATE: Predicate[int] = TypeOf(Primitive.INTEGER)
BOOLEAN_PREDICATE: Predicate[bool] = TypeOf(Primitive.BOOLEAN)
NOTHING_PREDICATE: Predicate[None] = TypeOf(Primitive.NOTHING)
UNKNOWN_PREDICATE: Predicate[Any] = TypeOf(Primitive.UNKNOWN)
