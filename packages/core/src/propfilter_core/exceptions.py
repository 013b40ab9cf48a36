"""
Exception hierarchy for propfilter.

All exceptions inherit from ``PropFilterError`` and provide ``to_dict()``
for API-friendly error responses.
"""

from __future__ import annotations

from typing import Any


class PropFilterError(Exception):
    """Root exception for the entire propfilter toolkit."""

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.__class__.__name__,
            "message": str(self),
        }


class RangeError(PropFilterError, ValueError):
    """A range value is structurally invalid (e.g. ``min > max``)."""


class RangeParseError(RangeError):
    """A range string could not be parsed."""

    def __init__(self, text: str, reason: str) -> None:
        self.text = text
        self.reason = reason
        super().__init__(f"Cannot parse range {text!r}: {reason}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "RANGE_PARSE_ERROR",
            "text": self.text,
            "message": self.reason,
        }


class UnsupportedRangeTypeError(PropFilterError):
    """
    A range's bound type has no registered comparison support.

    Only raised when filtering in strict mode; otherwise the property is
    skipped and a warning is logged.
    """

    def __init__(self, field: str, value_type: Any) -> None:
        self.field = field
        self.value_type = value_type
        name = getattr(value_type, "__name__", repr(value_type))
        super().__init__(
            f"Range on '{field}' has unsupported bound type '{name}'"
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "UNSUPPORTED_RANGE_TYPE",
            "field": self.field,
            "value_type": getattr(self.value_type, "__name__", repr(self.value_type)),
        }


class CoercionError(PropFilterError, ValueError):
    """A filter value could not be converted to the property's type."""

    def __init__(self, value: Any, target: type[Any], reason: str | None = None) -> None:
        self.value = value
        self.target = target
        message = f"Cannot coerce {value!r} to {target.__name__}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class EntityResolutionError(PropFilterError):
    """The queried entity type could not be determined from the query."""
