"""
Filter engine: match, classify, compile and fold.

``FilterEngine.apply`` is the accumulator.  It pairs the filter object's
properties with the entity's, classifies each pair into a clause, asks
the backend to compile the clause into a predicate and appends every
predicate to the query with the backend's ``where``.  Queries are never
mutated; each fold produces a new query value.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from .bounds import DEFAULT_BOUND_REGISTRY
from .clauses import classify
from .matching import index_properties, match_properties
from .options import DEFAULT_OPTIONS

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from .bounds import BoundTypeRegistry
    from .clauses import Clause
    from .options import FilterOptions
    from .properties import EntityProperty
    from .strategy import ClauseCompilerRegistry

logger = logging.getLogger(__name__)

Q = TypeVar("Q")
P = TypeVar("P")


class FilterBackend(ABC, Generic[Q, P]):
    """
    Backend seam: entity introspection, predicate compilation and
    conjunctive composition for one query technology.
    """

    def __init__(self, compilers: ClauseCompilerRegistry[P]) -> None:
        self.compilers = compilers

    @abstractmethod
    def entity_properties(self, query: Q, entity: Any | None) -> Iterable[EntityProperty]:
        """Return the addressable properties of the queried entity."""
        ...

    @abstractmethod
    def where(self, query: Q, predicate: P) -> Q:
        """Return a new query with *predicate* AND-ed onto *query*."""
        ...

    def compile(
        self,
        prop: EntityProperty,
        clause: Clause,
        options: FilterOptions,
    ) -> P | None:
        return self.compilers.compile(prop, clause, options)


class FilterEngine(Generic[Q, P]):
    """
    Apply filter objects to queries of one backend.

    Engines hold no per-call state and may be shared.
    """

    def __init__(
        self,
        backend: FilterBackend[Q, P],
        *,
        registry: BoundTypeRegistry | None = None,
        options: FilterOptions | None = None,
    ) -> None:
        self._backend = backend
        self._registry = registry or DEFAULT_BOUND_REGISTRY
        self._options = options or DEFAULT_OPTIONS

    @property
    def options(self) -> FilterOptions:
        return self._options

    def plan(
        self,
        entity_properties: dict[str, EntityProperty],
        filter_obj: Any,
    ) -> Iterator[tuple[EntityProperty, Clause]]:
        """Yield the clause chosen for each matched property, in filter order."""
        for entity_prop, filter_prop in match_properties(entity_properties, filter_obj):
            clause = classify(
                entity_prop.name,
                filter_prop.declared_type,
                filter_prop.value,
                registry=self._registry,
                options=self._options,
            )
            if clause is not None:
                yield entity_prop, clause

    def apply(self, query: Q, filter_obj: Any, *, entity: Any | None = None) -> Q:
        """
        Return *query* with one conjunctive predicate per constrained property.

        ``None`` filters return *query* itself.
        """
        if filter_obj is None:
            return query

        properties = index_properties(self._backend.entity_properties(query, entity))
        result = query
        for prop, clause in self.plan(properties, filter_obj):
            predicate = self._backend.compile(prop, clause, self._options)
            if predicate is None:
                logger.debug("No %s predicate for %r; property skipped", clause.kind.value, prop.name)
                continue
            result = self._backend.where(result, predicate)
        return result
