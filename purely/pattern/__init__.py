"""
Purely Pattern Package
======================

Predicates, the pattern compiler and the predicate constructor library.
"""

from .compiler import CompiledPattern, compile_pattern, to_predicate
from .library import (
    all_of,
    array_of,
    between,
    boolean,
    custom,
    gt,
    gte,
    instance_of,
    integer,
    literal,
    lt,
    lte,
    nothing,
    number,
    one_of,
    optional,
    predicate,
    record_of,
    string,
    union,
    unknown,
)
from .predicates import ComparisonOp, Predicate, PredicateKind, Primitive

__all__ = [
    "CompiledPattern",
    "ComparisonOp",
    "Predicate",
    "PredicateKind",
    "Primitive",
    "all_of",
    "array_of",
    "between",
    "boolean",
    "compile_pattern",
    "custom",
    "gt",
    "gte",
    "instance_of",
    "integer",
    "literal",
    "lt",
    "lte",
    "nothing",
    "number",
    "one_of",
    "optional",
    "predicate",
    "record_of",
    "string",
    "to_predicate",
    "union",
    "unknown",
]
