"""
Entity surface discovery for SQLAlchemy mapped classes.

The filterable properties of a mapped class are its public column
attributes and hybrid properties.  Relationships are not comparable and
are left out.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from sqlalchemy import inspect as sa_inspect
from sqlalchemy.exc import NoInspectionAvailable
from sqlalchemy.ext.hybrid import HybridExtensionType

from propfilter_core.exceptions import EntityResolutionError
from propfilter_core.properties import EntityProperty

if TYPE_CHECKING:
    from sqlalchemy.orm import Mapper

logger = logging.getLogger(__name__)


def _python_type(sa_type: Any) -> type[Any] | None:
    if sa_type is None:
        return None
    try:
        python_type = sa_type.python_type
    except NotImplementedError:
        return None
    return python_type if isinstance(python_type, type) else None


def _mapper_for(model: Any) -> Mapper[Any]:
    try:
        mapper = sa_inspect(model)
    except NoInspectionAvailable as exc:
        raise EntityResolutionError(f"{model!r} is not a mapped class") from exc
    # inspect() on an instance returns InstanceState
    return getattr(mapper, "mapper", mapper)


def describe_model(model: Any) -> list[EntityProperty]:
    """
    Return the filterable properties of a mapped class.

    Raises:
        EntityResolutionError: If *model* is not mapped.
    """
    mapper = _mapper_for(model)
    cls = mapper.class_
    props: list[EntityProperty] = []

    for column_prop in mapper.column_attrs:
        key = column_prop.key
        if key.startswith("_"):
            continue
        column = column_prop.columns[0]
        props.append(
            EntityProperty(
                name=key,
                python_type=_python_type(getattr(column, "type", None)),
                nullable=bool(getattr(column, "nullable", True)),
                attribute=getattr(cls, key),
            )
        )

    for key, descriptor in mapper.all_orm_descriptors.items():
        if key.startswith("_"):
            continue
        if getattr(descriptor, "extension_type", None) is not HybridExtensionType.HYBRID_PROPERTY:
            continue
        expression = getattr(cls, key)
        props.append(
            EntityProperty(
                name=key,
                python_type=_python_type(getattr(expression, "type", None)),
                nullable=True,
                attribute=expression,
            )
        )

    return props


def resolve_entity(query: Any) -> Any:
    """
    Determine the mapped class a ``Select`` or ``orm.Query`` selects from.

    Raises:
        EntityResolutionError: If no mapped entity is found.
    """
    descriptions = getattr(query, "column_descriptions", None) or []
    for description in descriptions:
        entity = description.get("entity")
        if entity is not None:
            return entity
    raise EntityResolutionError(
        "Cannot determine the queried entity; pass entity= explicitly"
    )
