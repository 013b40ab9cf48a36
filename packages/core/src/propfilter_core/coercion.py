"""
Conversion of loosely-typed filter values to a property's Python type.

Filter objects are frequently populated from query strings or JSON, so
``"42"`` must compare against an integer column and ``"2024-01-15"``
against a date column.  These helpers are pure Python with no
infrastructure dependencies.
"""

from __future__ import annotations

import datetime
import enum
import uuid as uuid_module
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING, Any

from .exceptions import CoercionError

if TYPE_CHECKING:
    from collections.abc import Callable

_TRUE_STRINGS = frozenset({"true", "1", "yes", "on"})
_FALSE_STRINGS = frozenset({"false", "0", "no", "off"})


# ---------------------------------------------------------------------------
# Per-type converters
# ---------------------------------------------------------------------------


def _to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        low = value.strip().lower()
        if low in _TRUE_STRINGS:
            return True
        if low in _FALSE_STRINGS:
            return False
        raise ValueError("not a boolean literal")
    if isinstance(value, int | float | Decimal):
        return bool(value)
    raise TypeError(f"unsupported source type {type(value).__name__}")


def _to_int(value: Any) -> int:
    if isinstance(value, bool):
        raise TypeError("bool is not an integer value")
    if isinstance(value, str):
        return int(value.strip())
    if isinstance(value, float | Decimal):
        if value != int(value):
            raise ValueError("value has a fractional part")
        return int(value)
    if isinstance(value, int):
        return int(value)
    raise TypeError(f"unsupported source type {type(value).__name__}")


def _to_float(value: Any) -> float:
    if isinstance(value, str):
        return float(value.strip())
    if isinstance(value, int | float | Decimal):
        return float(value)
    raise TypeError(f"unsupported source type {type(value).__name__}")


def _to_decimal(value: Any) -> Decimal:
    if isinstance(value, float):
        # str() keeps the shortest repr (4.5 -> "4.5"), not the binary expansion
        return Decimal(str(value))
    if isinstance(value, str):
        return Decimal(value.strip())
    if isinstance(value, int | Decimal):
        return Decimal(value)
    raise TypeError(f"unsupported source type {type(value).__name__}")


def _to_str(value: Any) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return str(value)


def _to_datetime(value: Any) -> datetime.datetime:
    if isinstance(value, datetime.datetime):
        return value
    if isinstance(value, datetime.date):
        return datetime.datetime.combine(value, datetime.time.min)
    if isinstance(value, str):
        return datetime.datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    raise TypeError(f"unsupported source type {type(value).__name__}")


def _to_date(value: Any) -> datetime.date:
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    if isinstance(value, str):
        return datetime.date.fromisoformat(value.strip())
    raise TypeError(f"unsupported source type {type(value).__name__}")


def _to_time(value: Any) -> datetime.time:
    if isinstance(value, datetime.time):
        return value
    if isinstance(value, str):
        return datetime.time.fromisoformat(value.strip())
    raise TypeError(f"unsupported source type {type(value).__name__}")


def _to_uuid(value: Any) -> uuid_module.UUID:
    if isinstance(value, uuid_module.UUID):
        return value
    if isinstance(value, bytes):
        return uuid_module.UUID(bytes=value)
    return uuid_module.UUID(str(value))


def _to_bytes(value: Any) -> bytes:
    if isinstance(value, bytes):
        return value
    if isinstance(value, str):
        return value.encode("utf-8")
    raise TypeError(f"unsupported source type {type(value).__name__}")


def _to_enum(value: Any, target: type[enum.Enum]) -> enum.Enum:
    if isinstance(value, target):
        return value
    try:
        return target(value)
    except ValueError:
        pass
    if isinstance(value, str):
        try:
            return target[value]
        except KeyError:
            pass
    raise ValueError(f"{value!r} is not a member of {target.__name__}")


# Order matters for lookup by MRO: ``bool`` before ``int`` and
# ``datetime`` before ``date``.
_COERCERS: dict[type[Any], Callable[[Any], Any]] = {
    bool: _to_bool,
    int: _to_int,
    float: _to_float,
    Decimal: _to_decimal,
    str: _to_str,
    datetime.datetime: _to_datetime,
    datetime.date: _to_date,
    datetime.time: _to_time,
    uuid_module.UUID: _to_uuid,
    bytes: _to_bytes,
}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def coerce_value(value: Any, target: type[Any] | None) -> Any:
    """
    Convert *value* to *target*.

    ``None`` and ``object`` targets pass the value through unchanged, as
    does a value that already is an instance of *target*.  ``bool`` is
    never accepted as an ``int`` and a ``datetime`` is narrowed to its
    ``date`` when the target is ``date``.

    Raises:
        CoercionError: If no conversion exists or the conversion fails.
    """
    if value is None or target is None or target is object:
        return value

    if _is_exact_instance(value, target):
        return value

    if isinstance(target, type) and issubclass(target, enum.Enum):
        try:
            return _to_enum(value, target)
        except (TypeError, ValueError) as exc:
            raise CoercionError(value, target, str(exc)) from exc

    converter = _find_converter(target)
    if converter is None:
        raise CoercionError(value, target, "no conversion registered")
    try:
        return converter(value)
    except (TypeError, ValueError, ArithmeticError, InvalidOperation) as exc:
        raise CoercionError(value, target, str(exc)) from exc


def widen_value(value: Any, target: type[Any] | None) -> Any:
    """
    Convert *value* to *target* when that loses nothing, else return it unchanged.

    Used for range bounds and membership elements: ``1.5`` against an
    ``int`` property stays ``1.5`` and is compared as is, instead of the
    whole constraint being dropped.
    """
    try:
        return coerce_value(value, target)
    except CoercionError:
        return value
