"""
Purely - Pattern Matching and Guarded Mutation
==============================================

Two primitives for writing in a pure functional style:

- a structural pattern matcher: ``match(subject).with_(pattern, handler)``
  with literals, partial object/array shapes and composable predicates
- a guarded mutation cell: ``read, write = make_cell(initial)`` where every
  read sees a frozen snapshot and writes cannot happen synchronously or
  twice in one turn
"""

from .cell import (
    AsyncioScheduler,
    MutationCell,
    Scheduler,
    TurnScheduler,
    WriteMode,
    Writer,
    get_default_scheduler,
    make_cell,
    set_default_scheduler,
)
from .cell.scheduler import _reset_default_scheduler
from .errors import (
    CellError,
    ChainConsumedError,
    DuplicateWriteError,
    NoMatchError,
    PatternError,
    PurelyError,
    SynchronousWriteError,
)
from .matching import (
    Arm,
    MatchChain,
    MatchMode,
    MatchResult,
    evaluate,
    match,
    matches,
    narrow,
)
from .pattern import (
    CompiledPattern,
    Predicate,
    PredicateKind,
    all_of,
    array_of,
    between,
    boolean,
    compile_pattern,
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
from .types import MISSING, NO_MATCH, TypeTag

__version__ = "0.1.0"

__all__ = [
    # Pattern construction
    "CompiledPattern",
    "Predicate",
    "PredicateKind",
    "TypeTag",
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
    "union",
    "unknown",
    # Matching
    "Arm",
    "MatchChain",
    "MatchMode",
    "MatchResult",
    "evaluate",
    "match",
    "matches",
    "narrow",
    # Mutation cells
    "AsyncioScheduler",
    "MutationCell",
    "Scheduler",
    "TurnScheduler",
    "WriteMode",
    "Writer",
    "get_default_scheduler",
    "make_cell",
    "set_default_scheduler",
    # Sentinels
    "MISSING",
    "NO_MATCH",
    # Exceptions
    "CellError",
    "ChainConsumedError",
    "DuplicateWriteError",
    "NoMatchError",
    "PatternError",
    "PurelyError",
    "SynchronousWriteError",
    # Testing utilities (internal use)
    "_reset_default_scheduler",
]
