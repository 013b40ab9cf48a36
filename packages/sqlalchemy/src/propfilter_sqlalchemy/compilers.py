"""
SQLAlchemy clause compilers.

One strategy per clause kind, registered in a
:class:`ClauseCompilerRegistry`.  Each compiler turns a clause into a
``ColumnElement[bool]`` against the entity property's instrumented
attribute, or returns ``None`` when the clause cannot be expressed
(the property is then left unconstrained).

Usage::

    from propfilter_sqlalchemy.compilers import DEFAULT_SQLA_COMPILERS

    expr = DEFAULT_SQLA_COMPILERS.compile(prop, clause, options)
"""

from __future__ import annotations

import logging
import operator as op_module
from typing import TYPE_CHECKING, Any, cast

from sqlalchemy import and_
from sqlalchemy.exc import SQLAlchemyError

from propfilter_core.clauses import ClauseKind
from propfilter_core.exceptions import CoercionError
from propfilter_core.strategy import ClauseCompiler, ClauseCompilerRegistry

if TYPE_CHECKING:
    from sqlalchemy import ColumnElement

    from propfilter_core.clauses import EqualityClause, MembershipClause, RangeClause
    from propfilter_core.options import FilterOptions
    from propfilter_core.properties import EntityProperty

logger = logging.getLogger(__name__)

# Construction failures that leave the property unconstrained
_BUILD_ERRORS = (CoercionError, SQLAlchemyError, TypeError, ValueError)


class EqualityCompiler(ClauseCompiler["ColumnElement[bool]"]):
    @property
    def kind(self) -> ClauseKind:
        return ClauseKind.EQUALITY

    def compile(
        self, prop: EntityProperty, clause: EqualityClause, options: FilterOptions
    ) -> ColumnElement[bool] | None:
        try:
            value = self.coerce(prop, clause.value)
            return cast("ColumnElement[bool]", op_module.eq(prop.attribute, value))
        except _BUILD_ERRORS as exc:
            logger.debug("Equality on %r skipped: %s", prop.name, exc)
            return None


class MembershipCompiler(ClauseCompiler["ColumnElement[bool]"]):
    @property
    def kind(self) -> ClauseKind:
        return ClauseKind.MEMBERSHIP

    def compile(
        self, prop: EntityProperty, clause: MembershipClause, options: FilterOptions
    ) -> ColumnElement[bool] | None:
        if not clause.values:
            return None
        column = prop.attribute
        try:
            values = [self.widen(prop, v) for v in clause.values]
            expr = column.in_(values)
            if options.guard_nullable_membership and prop.nullable:
                expr = and_(column.is_not(None), expr)
        except _BUILD_ERRORS as exc:
            logger.debug("Membership on %r skipped: %s", prop.name, exc)
            return None
        return cast("ColumnElement[bool]", expr)


class RangeCompiler(ClauseCompiler["ColumnElement[bool]"]):
    @property
    def kind(self) -> ClauseKind:
        return ClauseKind.RANGE

    def compile(
        self, prop: EntityProperty, clause: RangeClause, options: FilterOptions
    ) -> ColumnElement[bool] | None:
        rng = clause.range
        column = prop.attribute
        bounds: list[Any] = []
        try:
            if rng.min_value is not None:
                low = self.widen(prop, rng.min_value)
                bounds.append(
                    op_module.ge(column, low) if rng.is_min_inclusive else op_module.gt(column, low)
                )
            if rng.max_value is not None:
                high = self.widen(prop, rng.max_value)
                bounds.append(
                    op_module.le(column, high) if rng.is_max_inclusive else op_module.lt(column, high)
                )
        except _BUILD_ERRORS as exc:
            logger.debug("Range on %r skipped: %s", prop.name, exc)
            return None

        if not bounds:
            return None
        if len(bounds) == 1:
            return cast("ColumnElement[bool]", bounds[0])
        return and_(*bounds)


def build_default_sqla_compilers() -> ClauseCompilerRegistry[ColumnElement[bool]]:
    """Create a registry with all built-in SQLAlchemy clause compilers."""
    registry: ClauseCompilerRegistry[ColumnElement[bool]] = ClauseCompilerRegistry()
    registry.register_all(
        EqualityCompiler(),
        MembershipCompiler(),
        RangeCompiler(),
    )
    return registry


DEFAULT_SQLA_COMPILERS: ClauseCompilerRegistry[ColumnElement[bool]] = (
    build_default_sqla_compilers()
)
