"""
Property introspection for filter objects and in-memory entity types.

A filter object's *declared* property types drive clause selection, so
type hints are read wherever the object carries them:

- pydantic models: ``model_fields`` annotations, in declaration order.
- dataclasses: field annotations, in declaration order.
- mappings: keys in insertion order; the declared type of each entry is
  the runtime type of its value (there is nothing else to declare it).
- other objects: class annotations, then instance attributes, then
  ``property`` descriptors (whose return annotation is the declared type).

Names starting with ``_`` are private and never exposed.
"""

from __future__ import annotations

import dataclasses
import types
import typing
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar

from pydantic import BaseModel

if TYPE_CHECKING:
    from collections.abc import Iterator


@dataclass(frozen=True)
class FilterProperty:
    """A public property of a filter object and its declared type."""

    name: str
    declared_type: Any
    value: Any


@dataclass(frozen=True)
class EntityProperty:
    """
    An addressable field of the queried entity.

    Attributes:
        name: Attribute name as declared on the entity.
        python_type: Underlying (non-optional) Python type, or ``None``
            when unknown; values are not coerced for unknown types.
        nullable: Whether the field may hold ``None`` / NULL.
        attribute: Backend handle used to build predicates (e.g. an
            instrumented SQLAlchemy attribute).  ``None`` for in-memory
            entities.
    """

    name: str
    python_type: type[Any] | None = None
    nullable: bool = True
    attribute: Any = None


# ---------------------------------------------------------------------------
# Type helpers
# ---------------------------------------------------------------------------


def unwrap_optional(tp: Any) -> tuple[Any, bool]:
    """
    Split ``Optional[X]`` / ``X | None`` into ``(X, True)``.

    Unions of several non-``None`` members are returned unchanged.
    """
    origin = typing.get_origin(tp)
    if origin is typing.Union or origin is types.UnionType:
        args = [a for a in typing.get_args(tp) if a is not type(None)]
        if len(args) == 1:
            return args[0], True
        return tp, len(args) != len(typing.get_args(tp))
    return tp, False


def _is_unknown(tp: Any) -> bool:
    return (
        tp is None
        or tp is Any
        or tp is object
        or isinstance(tp, (str, typing.TypeVar, typing.ForwardRef))
    )


def _declared(tp: Any, value: Any) -> Any:
    declared, _ = unwrap_optional(tp)
    if _is_unknown(declared):
        return type(value)
    return declared


def _type_hints(cls: type[Any]) -> dict[str, Any]:
    """Resolved class annotations; unresolved forward references become ``None``."""
    try:
        hints = typing.get_type_hints(cls)
    except (NameError, TypeError):
        hints = {}
        for klass in reversed(cls.__mro__):
            for name, tp in getattr(klass, "__annotations__", {}).items():
                hints[name] = None if isinstance(tp, str) else tp
    return {
        name: tp
        for name, tp in hints.items()
        if typing.get_origin(tp) is not ClassVar and tp is not ClassVar
    }


def _property_hint(prop: property) -> Any:
    if prop.fget is None:
        return None
    try:
        return typing.get_type_hints(prop.fget).get("return")
    except (NameError, TypeError):
        return None


def _public_properties(cls: type[Any]) -> dict[str, property]:
    found: dict[str, property] = {}
    for klass in reversed(cls.__mro__):
        for name, member in vars(klass).items():
            if isinstance(member, property) and member.fget is not None:
                found[name] = member
    return {n: p for n, p in found.items() if not n.startswith("_")}


# ---------------------------------------------------------------------------
# Filter objects
# ---------------------------------------------------------------------------


def iter_filter_properties(filter_obj: Any) -> Iterator[FilterProperty]:
    """Yield the public readable properties of *filter_obj* in declared order."""
    if isinstance(filter_obj, Mapping):
        for key, value in filter_obj.items():
            if isinstance(key, str) and not key.startswith("_"):
                yield FilterProperty(key, type(value), value)
        return

    if isinstance(filter_obj, BaseModel):
        for name, info in type(filter_obj).model_fields.items():
            if name.startswith("_"):
                continue
            value = getattr(filter_obj, name)
            yield FilterProperty(name, _declared(info.annotation, value), value)
        return

    cls = type(filter_obj)
    hints = _type_hints(cls)

    if dataclasses.is_dataclass(filter_obj):
        for f in dataclasses.fields(filter_obj):
            if f.name.startswith("_"):
                continue
            value = getattr(filter_obj, f.name)
            yield FilterProperty(f.name, _declared(hints.get(f.name), value), value)
        return

    seen: set[str] = set()
    instance_vars = getattr(filter_obj, "__dict__", {})
    for name in [*hints, *instance_vars]:
        if name in seen or name.startswith("_"):
            continue
        seen.add(name)
        if not hasattr(filter_obj, name):
            continue
        value = getattr(filter_obj, name)
        if callable(value) and name not in instance_vars:
            continue
        yield FilterProperty(name, _declared(hints.get(name), value), value)

    for name, prop in _public_properties(cls).items():
        if name in seen:
            continue
        seen.add(name)
        value = getattr(filter_obj, name)
        yield FilterProperty(name, _declared(_property_hint(prop), value), value)


# ---------------------------------------------------------------------------
# Entity types
# ---------------------------------------------------------------------------


def describe_entity(entity: type[Any]) -> list[EntityProperty]:
    """Return the public readable properties of a plain Python entity type."""
    hints = _type_hints(entity)
    names: list[str]
    if issubclass(entity, BaseModel):
        names = list(entity.model_fields)
        hints = {n: entity.model_fields[n].annotation for n in names}
    elif dataclasses.is_dataclass(entity):
        names = [f.name for f in dataclasses.fields(entity)]
    else:
        names = list(hints)

    props: list[EntityProperty] = []
    for name in names:
        if name.startswith("_"):
            continue
        props.append(_entity_property(name, hints.get(name)))
    for name, prop in _public_properties(entity).items():
        if name not in names:
            props.append(_entity_property(name, _property_hint(prop)))
    return props


def _entity_property(name: str, hint: Any) -> EntityProperty:
    underlying, nullable = unwrap_optional(hint)
    python_type = None
    # Parameterised generics (list[str], ...) are not coercion targets.
    if (
        isinstance(underlying, type)
        and typing.get_origin(underlying) is None
        and not _is_unknown(underlying)
    ):
        python_type = underlying
    return EntityProperty(
        name=name,
        python_type=python_type,
        nullable=nullable or python_type is None,
    )
