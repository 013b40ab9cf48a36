"""
In-memory backend.

Applies the same clause semantics as the database backends to plain
Python objects.  ``MemoryQuery`` is an immutable query over a sequence of
objects; each ``where`` returns a new query and rows are only evaluated
when the query is iterated::

    people = MemoryQuery(rows, entity=Person)
    adults = apply_filter(people, {"age": Range.at_least(18)})
    names = [p.name for p in adults]

Rows whose property is ``None`` never satisfy a range clause, and never
satisfy a membership clause on a nullable property unless the guard is
disabled in :class:`FilterOptions`.  Naive datetime bounds compared
against offset-aware values are read as UTC, the way a database reads a
naive literal against a ``timestamptz`` column.
"""

from __future__ import annotations

import datetime
import logging
import operator as op_module
from collections.abc import Callable, Iterable, Iterator
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from .clauses import ClauseKind
from .engine import FilterBackend, FilterEngine
from .exceptions import CoercionError
from .properties import describe_entity
from .strategy import ClauseCompiler, ClauseCompilerRegistry

if TYPE_CHECKING:
    from .bounds import BoundTypeRegistry
    from .clauses import EqualityClause, MembershipClause, RangeClause
    from .options import FilterOptions
    from .properties import EntityProperty

logger = logging.getLogger(__name__)

T = TypeVar("T")
Predicate = Callable[[Any], bool]


class MemoryQuery(Generic[T]):
    """Immutable, lazily evaluated conjunctive query over Python objects."""

    def __init__(
        self,
        items: Iterable[T],
        *,
        entity: type[T] | None = None,
        predicates: tuple[Predicate, ...] = (),
    ) -> None:
        self._items: tuple[T, ...] = tuple(items)
        self._entity = entity
        self._predicates = predicates

    @property
    def entity(self) -> type[T] | None:
        """The declared entity type, or the type of the first row."""
        if self._entity is not None:
            return self._entity
        if self._items:
            return type(self._items[0])
        return None

    @property
    def predicates(self) -> tuple[Predicate, ...]:
        return self._predicates

    def where(self, predicate: Predicate) -> MemoryQuery[T]:
        return MemoryQuery(
            self._items,
            entity=self._entity,
            predicates=(*self._predicates, predicate),
        )

    def __iter__(self) -> Iterator[T]:
        for item in self._items:
            if all(p(item) for p in self._predicates):
                yield item

    def all(self) -> list[T]:
        return list(self)

    def count(self) -> int:
        return sum(1 for _ in self)

    def __repr__(self) -> str:
        return (
            f"<MemoryQuery entity={getattr(self.entity, '__name__', None)} "
            f"rows={len(self._items)} predicates={len(self._predicates)}>"
        )


# ---------------------------------------------------------------------------
# Compilers
# ---------------------------------------------------------------------------


class MemoryEqualityCompiler(ClauseCompiler[Predicate]):
    @property
    def kind(self) -> ClauseKind:
        return ClauseKind.EQUALITY

    def compile(
        self, prop: EntityProperty, clause: EqualityClause, options: FilterOptions
    ) -> Predicate | None:
        try:
            expected = self.coerce(prop, clause.value)
        except CoercionError as exc:
            logger.debug("Equality on %r skipped: %s", prop.name, exc)
            return None
        name = prop.name

        def predicate(obj: Any) -> bool:
            return bool(getattr(obj, name) == expected)

        return predicate


class MemoryMembershipCompiler(ClauseCompiler[Predicate]):
    @property
    def kind(self) -> ClauseKind:
        return ClauseKind.MEMBERSHIP

    def compile(
        self, prop: EntityProperty, clause: MembershipClause, options: FilterOptions
    ) -> Predicate | None:
        if not clause.values:
            return None
        expected = tuple(self.widen(prop, v) for v in clause.values)
        name = prop.name
        guarded = options.guard_nullable_membership and prop.nullable

        def predicate(obj: Any) -> bool:
            actual = getattr(obj, name)
            if guarded and actual is None:
                return False
            return actual in expected

        return predicate


def _align(actual: Any, bound: Any) -> Any:
    """Give a naive datetime bound the awareness of an aware row value (as UTC)."""
    if (
        isinstance(actual, datetime.datetime)
        and isinstance(bound, datetime.datetime)
        and actual.tzinfo is not None
        and bound.tzinfo is None
    ):
        return bound.replace(tzinfo=datetime.timezone.utc)
    return bound


def _compare(actual: Any, bound: Any, compare: Callable[[Any, Any], bool]) -> bool:
    try:
        return compare(actual, _align(actual, bound))
    except TypeError:
        # Incomparable row values never satisfy a bound
        return False


class MemoryRangeCompiler(ClauseCompiler[Predicate]):
    @property
    def kind(self) -> ClauseKind:
        return ClauseKind.RANGE

    def compile(
        self, prop: EntityProperty, clause: RangeClause, options: FilterOptions
    ) -> Predicate | None:
        rng = clause.range
        low = self.widen(prop, rng.min_value)
        high = self.widen(prop, rng.max_value)
        if low is None and high is None:
            return None
        name = prop.name
        low_op = op_module.ge if rng.is_min_inclusive else op_module.gt
        high_op = op_module.le if rng.is_max_inclusive else op_module.lt

        def predicate(obj: Any) -> bool:
            actual = getattr(obj, name)
            if actual is None:
                return False
            if low is not None and not _compare(actual, low, low_op):
                return False
            return high is None or _compare(actual, high, high_op)

        return predicate


def build_default_memory_compilers() -> ClauseCompilerRegistry[Predicate]:
    """Create a registry with the built-in in-memory compilers."""
    registry: ClauseCompilerRegistry[Predicate] = ClauseCompilerRegistry()
    registry.register_all(
        MemoryEqualityCompiler(),
        MemoryMembershipCompiler(),
        MemoryRangeCompiler(),
    )
    return registry


class MemoryBackend(FilterBackend[MemoryQuery[Any], Predicate]):
    """Backend binding :class:`MemoryQuery` to the filter engine."""

    def __init__(self, compilers: ClauseCompilerRegistry[Predicate] | None = None) -> None:
        super().__init__(compilers or build_default_memory_compilers())

    def entity_properties(
        self, query: MemoryQuery[Any], entity: Any | None
    ) -> list[EntityProperty]:
        target = entity or query.entity
        if target is None:
            return []
        return describe_entity(target)

    def where(self, query: MemoryQuery[Any], predicate: Predicate) -> MemoryQuery[Any]:
        return query.where(predicate)


def apply_filter(
    query: MemoryQuery[T],
    filter_obj: Any,
    *,
    entity: type[T] | None = None,
    options: FilterOptions | None = None,
    registry: BoundTypeRegistry | None = None,
) -> MemoryQuery[T]:
    """Return *query* narrowed by every constraint in *filter_obj*."""
    engine: FilterEngine[MemoryQuery[Any], Predicate] = FilterEngine(
        MemoryBackend(), registry=registry, options=options
    )
    return engine.apply(query, filter_obj, entity=entity)
