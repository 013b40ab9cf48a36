"""Filter-object to query-predicate translation: classification, ranges, coercion."""

from __future__ import annotations

from .bounds import (
    DEFAULT_BOUND_REGISTRY,
    BoundType,
    BoundTypeRegistry,
    build_default_bound_registry,
)
from .clauses import (
    Clause,
    ClauseKind,
    EqualityClause,
    MembershipClause,
    RangeClause,
    classify,
)
from .coercion import coerce_value, widen_value
from .engine import FilterBackend, FilterEngine
from .exceptions import (
    CoercionError,
    EntityResolutionError,
    PropFilterError,
    RangeError,
    RangeParseError,
    UnsupportedRangeTypeError,
)
from .matching import index_properties, match_properties
from .memory import MemoryBackend, MemoryQuery, apply_filter, build_default_memory_compilers
from .options import DEFAULT_OPTIONS, FilterOptions
from .properties import (
    EntityProperty,
    FilterProperty,
    describe_entity,
    iter_filter_properties,
)
from .ranges import Range, RangeLike
from .strategy import ClauseCompiler, ClauseCompilerRegistry

__all__ = [
    # Ranges
    "Range",
    "RangeLike",
    "BoundType",
    "BoundTypeRegistry",
    "DEFAULT_BOUND_REGISTRY",
    "build_default_bound_registry",
    # Classification
    "Clause",
    "ClauseKind",
    "EqualityClause",
    "MembershipClause",
    "RangeClause",
    "classify",
    # Introspection / matching
    "EntityProperty",
    "FilterProperty",
    "describe_entity",
    "iter_filter_properties",
    "index_properties",
    "match_properties",
    # Engine / strategy
    "FilterBackend",
    "FilterEngine",
    "ClauseCompiler",
    "ClauseCompilerRegistry",
    "FilterOptions",
    "DEFAULT_OPTIONS",
    # In-memory backend
    "MemoryBackend",
    "MemoryQuery",
    "apply_filter",
    "build_default_memory_compilers",
    # Exceptions
    "PropFilterError",
    "RangeError",
    "RangeParseError",
    "UnsupportedRangeTypeError",
    "CoercionError",
    "EntityResolutionError",
    # Utilities
    "coerce_value",
    "widen_value",
]
