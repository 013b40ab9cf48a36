"""Pair filter properties with entity properties by case-insensitive name."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from .properties import iter_filter_properties

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from .properties import EntityProperty, FilterProperty

logger = logging.getLogger(__name__)


def index_properties(properties: Iterable[EntityProperty]) -> dict[str, EntityProperty]:
    """
    Index entity properties by case-folded name.

    Names colliding case-insensitively are not supported; the last one wins.
    """
    return {prop.name.casefold(): prop for prop in properties}


def match_properties(
    entity_properties: dict[str, EntityProperty],
    filter_obj: Any,
) -> Iterator[tuple[EntityProperty, FilterProperty]]:
    """
    Yield ``(entity_property, filter_property)`` pairs in filter order.

    Filter properties with no matching entity property, or whose value is
    ``None``, are skipped.  Never raises for unmatched names.
    """
    for filter_prop in iter_filter_properties(filter_obj):
        entity_prop = entity_properties.get(filter_prop.name.casefold())
        if entity_prop is None:
            logger.debug("Filter property %r has no entity counterpart", filter_prop.name)
            continue
        if filter_prop.value is None:
            continue
        yield entity_prop, filter_prop
