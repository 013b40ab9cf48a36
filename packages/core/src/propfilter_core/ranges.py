"""
Range values: bounded intervals with independently optional bounds.

``Range`` is the concrete value type; ``RangeLike`` is the abstract
contract the classifier recognises.  Third-party interval types exposing
``min_value``, ``max_value``, ``is_min_inclusive``, ``is_max_inclusive``
and ``value_type`` can take part by registering::

    RangeLike.register(MyInterval)

String form uses bracket notation: ``[`` / ``(`` for an inclusive /
exclusive lower bound, ``]`` / ``)`` for the upper bound, and an empty
bound for an unbounded side, e.g. ``"[4.5,5.0]"``, ``"(,10]"``,
``"[2010-01-01,2010-01-02)"``.
"""

from __future__ import annotations

import datetime
import typing
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from pydantic_core import core_schema

from .bounds import DEFAULT_BOUND_REGISTRY
from .coercion import coerce_value
from .exceptions import CoercionError, RangeError, RangeParseError

if TYPE_CHECKING:
    from pydantic import GetCoreSchemaHandler

    from .bounds import BoundTypeRegistry

V = TypeVar("V")


class RangeLike(ABC):
    """Abstract contract for interval values accepted as range filters."""

    __slots__ = ()

    @property
    @abstractmethod
    def min_value(self) -> Any:
        """Lower bound, or ``None`` for unbounded below."""
        ...

    @property
    @abstractmethod
    def max_value(self) -> Any:
        """Upper bound, or ``None`` for unbounded above."""
        ...

    @property
    @abstractmethod
    def is_min_inclusive(self) -> bool:
        ...

    @property
    @abstractmethod
    def is_max_inclusive(self) -> bool:
        ...

    @property
    def value_type(self) -> type[Any] | None:
        """The bound type; inferred from whichever bound is present."""
        sample = self.min_value if self.min_value is not None else self.max_value
        return type(sample) if sample is not None else None


class Range(RangeLike, Generic[V]):
    """
    Immutable interval over a scalar type.

    Args:
        min_value: Lower bound or ``None`` for unbounded below.
        max_value: Upper bound or ``None`` for unbounded above.
        is_min_inclusive: Whether ``min_value`` itself is included.
        is_max_inclusive: Whether ``max_value`` itself is included.
        value_type: The bound type.  Inferred from the bounds when
            omitted; stays ``None`` only when both bounds are absent.

    Raises:
        RangeError: If both bounds are present and ``min > max`` or the
            bounds cannot be compared.
    """

    __slots__ = ("_min", "_max", "_min_inclusive", "_max_inclusive", "_value_type")

    def __init__(
        self,
        min_value: V | None = None,
        max_value: V | None = None,
        is_min_inclusive: bool = True,
        is_max_inclusive: bool = True,
        value_type: type[Any] | None = None,
    ) -> None:
        if min_value is not None and max_value is not None:
            try:
                inverted = min_value > max_value
            except TypeError as exc:
                raise RangeError(
                    f"Range bounds are not comparable: {min_value!r}, {max_value!r}"
                ) from exc
            if inverted:
                raise RangeError(
                    f"Range minimum {min_value!r} is greater than maximum {max_value!r}"
                )
        self._min = min_value
        self._max = max_value
        self._min_inclusive = is_min_inclusive
        self._max_inclusive = is_max_inclusive
        self._value_type = value_type

    @property
    def min_value(self) -> V | None:
        return self._min

    @property
    def max_value(self) -> V | None:
        return self._max

    @property
    def is_min_inclusive(self) -> bool:
        return self._min_inclusive

    @property
    def is_max_inclusive(self) -> bool:
        return self._max_inclusive

    @property
    def value_type(self) -> type[Any] | None:
        if self._value_type is not None:
            return self._value_type
        return super().value_type

    def _key(self) -> tuple[Any, ...]:
        return (self._min, self._max, self._min_inclusive, self._max_inclusive)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Range):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __repr__(self) -> str:
        return (
            f"Range(min_value={self._min!r}, max_value={self._max!r}, "
            f"is_min_inclusive={self._min_inclusive}, "
            f"is_max_inclusive={self._max_inclusive})"
        )

    # -- constructors --------------------------------------------------------

    @classmethod
    def closed(cls, min_value: V, max_value: V) -> Range[V]:
        """``[min_value, max_value]``."""
        return cls(min_value, max_value, True, True)

    @classmethod
    def at_least(cls, min_value: V, *, inclusive: bool = True) -> Range[V]:
        return cls(min_value=min_value, is_min_inclusive=inclusive)

    @classmethod
    def at_most(cls, max_value: V, *, inclusive: bool = True) -> Range[V]:
        return cls(max_value=max_value, is_max_inclusive=inclusive)

    @classmethod
    def parse(
        cls,
        text: str,
        value_type: type[V],
        *,
        registry: BoundTypeRegistry | None = None,
    ) -> Range[V]:
        """
        Parse bracket notation into a ``Range`` of *value_type*.

        Raises:
            RangeParseError: If the text is malformed, a bound cannot be
                read as *value_type*, or *value_type* is not a registered
                bound type.
            RangeError: If the parsed minimum exceeds the maximum.
        """
        reg = registry or DEFAULT_BOUND_REGISTRY
        bound_type = reg.get(value_type)
        if bound_type is None:
            raise RangeParseError(
                text, f"unsupported bound type {getattr(value_type, '__name__', value_type)}"
            )

        stripped = text.strip()
        if len(stripped) < 3:
            raise RangeParseError(text, "expected '[min,max]' notation")
        opening, closing = stripped[0], stripped[-1]
        if opening not in "[(" or closing not in "])":
            raise RangeParseError(text, "range must start with '[' or '(' and end with ']' or ')'")

        parts = stripped[1:-1].split(",")
        if len(parts) != 2:
            raise RangeParseError(text, "expected exactly one ',' between bounds")

        bounds: list[Any] = []
        for part in parts:
            raw = part.strip()
            if not raw:
                bounds.append(None)
                continue
            try:
                bounds.append(bound_type.parse(raw))
            except (CoercionError, TypeError, ValueError) as exc:
                raise RangeParseError(text, f"invalid bound {raw!r}: {exc}") from exc

        return cls(
            min_value=bounds[0],
            max_value=bounds[1],
            is_min_inclusive=opening == "[",
            is_max_inclusive=closing == "]",
            value_type=value_type,
        )

    # -- queries -------------------------------------------------------------

    @property
    def is_unbounded(self) -> bool:
        """True when neither bound is present."""
        return self.min_value is None and self.max_value is None

    def contains(self, value: Any) -> bool:
        """Evaluate the interval against a concrete value (``None`` never matches)."""
        if value is None:
            return False
        if self.min_value is not None:
            if self.is_min_inclusive and not value >= self.min_value:
                return False
            if not self.is_min_inclusive and not value > self.min_value:
                return False
        if self.max_value is not None:
            if self.is_max_inclusive and not value <= self.max_value:
                return False
            if not self.is_max_inclusive and not value < self.max_value:
                return False
        return True

    def __contains__(self, value: Any) -> bool:
        return self.contains(value)

    def __str__(self) -> str:
        return (
            f"{'[' if self.is_min_inclusive else '('}"
            f"{_format_bound(self.min_value)},{_format_bound(self.max_value)}"
            f"{']' if self.is_max_inclusive else ')'}"
        )

    # -- pydantic integration ------------------------------------------------

    @classmethod
    def __get_pydantic_core_schema__(
        cls,
        source_type: Any,
        handler: GetCoreSchemaHandler,
    ) -> core_schema.CoreSchema:
        args = typing.get_args(source_type)
        value_type = args[0] if args and isinstance(args[0], type) else None

        def validate(value: Any) -> RangeLike:
            return cls._validate(value, value_type)

        return core_schema.no_info_plain_validator_function(
            validate,
            serialization=core_schema.plain_serializer_function_ser_schema(
                str, when_used="json"
            ),
        )

    @classmethod
    def _validate(cls, value: Any, value_type: type[Any] | None) -> RangeLike:
        if isinstance(value, RangeLike):
            return value
        if isinstance(value, str):
            if value_type is None:
                raise RangeParseError(value, "bound type is required to parse a range string")
            return cls.parse(value, value_type)
        if isinstance(value, Mapping):
            data = dict(value)
            if value_type is not None:
                for key in ("min_value", "max_value"):
                    if data.get(key) is not None:
                        data[key] = coerce_value(data[key], value_type)
                data.setdefault("value_type", value_type)
            try:
                return cls(**data)
            except TypeError as exc:
                raise RangeError(str(exc)) from exc
        raise RangeError(f"Cannot build a range from {type(value).__name__}")


def _format_bound(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, datetime.date | datetime.time):
        return value.isoformat()
    return str(value)
