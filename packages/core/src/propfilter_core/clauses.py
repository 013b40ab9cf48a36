"""
Clause classification.

Every matched filter property becomes at most one clause, chosen from the
property's declared type in priority order:

1. membership -- the declared type is iterable and not a string type;
   a one-element sized collection collapses into equality;
2. range -- the declared type is a :class:`RangeLike` whose bound type is
   registered in the :class:`BoundTypeRegistry`;
3. equality -- everything else.
"""

from __future__ import annotations

import logging
import typing
from collections.abc import Iterable, Sized
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

from .exceptions import UnsupportedRangeTypeError
from .options import DEFAULT_OPTIONS
from .ranges import RangeLike

if TYPE_CHECKING:
    from .bounds import BoundType, BoundTypeRegistry
    from .options import FilterOptions

logger = logging.getLogger(__name__)

_STRING_TYPES = (str, bytes, bytearray)


class ClauseKind(str, Enum):
    """Comparison semantics applied to one property."""

    EQUALITY = "equality"
    MEMBERSHIP = "membership"
    RANGE = "range"


@dataclass(frozen=True)
class EqualityClause:
    """``property == value``."""

    value: Any

    @property
    def kind(self) -> ClauseKind:
        return ClauseKind.EQUALITY


@dataclass(frozen=True)
class MembershipClause:
    """``property IN values``; an empty collection matches everything."""

    values: tuple[Any, ...]

    @property
    def kind(self) -> ClauseKind:
        return ClauseKind.MEMBERSHIP


@dataclass(frozen=True)
class RangeClause:
    """Lower and/or upper bound comparisons against one property."""

    range: RangeLike
    bound_type: BoundType

    @property
    def kind(self) -> ClauseKind:
        return ClauseKind.RANGE


Clause = EqualityClause | MembershipClause | RangeClause


def _origin(declared_type: Any) -> Any:
    return typing.get_origin(declared_type) or declared_type


def is_membership_type(declared_type: Any) -> bool:
    origin = _origin(declared_type)
    return (
        isinstance(origin, type)
        and issubclass(origin, Iterable)
        and not issubclass(origin, _STRING_TYPES)
        and not issubclass(origin, RangeLike)
    )


def is_range_type(declared_type: Any) -> bool:
    origin = _origin(declared_type)
    return isinstance(origin, type) and issubclass(origin, RangeLike)


def _is_sized_type(declared_type: Any) -> bool:
    origin = _origin(declared_type)
    return isinstance(origin, type) and issubclass(origin, Sized)


def _range_value_type(declared_type: Any, value: Any) -> Any:
    value_type = getattr(value, "value_type", None)
    if value_type is None:
        args = typing.get_args(declared_type)
        if args:
            value_type = args[0]
    return value_type


def classify(
    field: str,
    declared_type: Any,
    value: Any,
    *,
    registry: BoundTypeRegistry,
    options: FilterOptions = DEFAULT_OPTIONS,
) -> Clause | None:
    """
    Choose the clause for one filter property.

    Returns ``None`` when the property contributes no clause: a range of
    an unregistered bound type (unless ``options.strict``), a range with
    neither bound, or a value that does not match its declared
    collection type.

    Raises:
        UnsupportedRangeTypeError: In strict mode only, for a range with
            at least one bound.
    """
    if is_membership_type(declared_type):
        try:
            values = tuple(value)
        except TypeError:
            logger.debug("Filter property %r is declared iterable but is not", field)
            return None
        if (
            options.single_value_optimization
            and _is_sized_type(declared_type)
            and len(values) == 1
            and values[0] is not None
        ):
            return EqualityClause(values[0])
        return MembershipClause(values)

    if is_range_type(declared_type):
        if not isinstance(value, RangeLike):
            logger.debug("Filter property %r is declared a range but is not", field)
            return None
        if value.min_value is None and value.max_value is None:
            logger.debug("Range filter on %r has no bounds; ignoring", field)
            return None
        value_type = _range_value_type(declared_type, value)
        bound_type = registry.get(value_type)
        if bound_type is None:
            if options.strict:
                raise UnsupportedRangeTypeError(field, value_type)
            logger.warning(
                "Skipping range filter on %r: bound type %r is not registered",
                field,
                getattr(value_type, "__name__", value_type),
            )
            return None
        return RangeClause(value, bound_type)

    return EqualityClause(value)
