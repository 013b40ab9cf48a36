"""
Apply filter objects to SQLAlchemy statements.

``apply_filter`` accepts a 2.0-style ``Select`` or a legacy ``orm.Query``.
Both are generative: every predicate is appended with ``.where()``, which
returns a new statement, so the caller's statement is never modified and
intermediate statements may be reused freely::

    stmt = select(Person)
    filtered = apply_filter(stmt, {"first_name": ["Tim", "John"], "rating": Decimal("4.5")})
    rows = session.scalars(filtered).all()
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, TypeVar

from propfilter_core.engine import FilterBackend, FilterEngine

from .compilers import DEFAULT_SQLA_COMPILERS
from .entity import describe_model, resolve_entity

if TYPE_CHECKING:
    from sqlalchemy import ColumnElement

    from propfilter_core.bounds import BoundTypeRegistry
    from propfilter_core.options import FilterOptions
    from propfilter_core.properties import EntityProperty
    from propfilter_core.strategy import ClauseCompilerRegistry

S = TypeVar("S")


class SQLAlchemyBackend(FilterBackend[Any, "ColumnElement[bool]"]):
    """Backend binding SQLAlchemy statements to the filter engine."""

    def __init__(
        self,
        compilers: ClauseCompilerRegistry[ColumnElement[bool]] | None = None,
    ) -> None:
        super().__init__(compilers or DEFAULT_SQLA_COMPILERS)

    def entity_properties(self, query: Any, entity: Any | None) -> list[EntityProperty]:
        model = entity if entity is not None else resolve_entity(query)
        return describe_model(model)

    def where(self, query: Any, predicate: ColumnElement[bool]) -> Any:
        return query.where(predicate)


def build_engine(
    *,
    options: FilterOptions | None = None,
    registry: BoundTypeRegistry | None = None,
    compilers: ClauseCompilerRegistry[ColumnElement[bool]] | None = None,
) -> FilterEngine[Any, ColumnElement[bool]]:
    """Create a reusable engine for SQLAlchemy statements."""
    return FilterEngine(
        SQLAlchemyBackend(compilers),
        registry=registry,
        options=options,
    )


def apply_filter(
    stmt: S,
    filter_obj: Any,
    *,
    entity: Any | None = None,
    options: FilterOptions | None = None,
    registry: BoundTypeRegistry | None = None,
    compilers: ClauseCompilerRegistry[ColumnElement[bool]] | None = None,
) -> S:
    """
    Return *stmt* with one AND-ed predicate per constrained filter property.

    Args:
        stmt: A ``Select`` or ``orm.Query`` over a mapped entity.
        filter_obj: Filter object (mapping, dataclass, pydantic model or
            plain object).  ``None`` returns *stmt* unchanged.
        entity: Mapped class to filter on; taken from the statement's
            first selected entity when omitted.
        options: Behavioural switches, see :class:`FilterOptions`.
        registry: Bound types accepted in range filters.
        compilers: Clause compiler overrides.

    Raises:
        EntityResolutionError: If the entity cannot be determined.
        UnsupportedRangeTypeError: Only when ``options.strict`` is set.
    """
    engine = build_engine(options=options, registry=registry, compilers=compilers)
    return engine.apply(stmt, filter_obj, entity=entity)
