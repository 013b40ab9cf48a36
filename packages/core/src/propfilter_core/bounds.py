"""
Registry of scalar types that may bound a range.

A range clause is only built when the range's bound type is registered
here.  Each registration pairs a Python type with a parser used to read
bounds from range strings (``"[4.5,5.0]"``).  New bound types are added
by registering them, without touching the classifier or the backends::

    registry = build_default_bound_registry()
    registry.register(MyMoney, MyMoney.from_string)
"""

from __future__ import annotations

import datetime
from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from .coercion import coerce_value

if TYPE_CHECKING:
    from collections.abc import Callable


@dataclass(frozen=True)
class BoundType:
    """A registered bound type and the parser for its string form."""

    python_type: type[Any]
    parser: Callable[[str], Any]

    def parse(self, text: str) -> Any:
        return self.parser(text)


class BoundTypeRegistry:
    """
    Registry of :class:`BoundType` instances keyed by Python type.

    Lookup walks the MRO of the requested type so subclasses of a
    registered type are supported, but the most specific registration
    wins (``datetime`` over ``date``).
    """

    def __init__(self) -> None:
        self._types: dict[type[Any], BoundType] = {}

    # -- registration --------------------------------------------------------

    def register(
        self,
        python_type: type[Any],
        parser: Callable[[str], Any] | None = None,
    ) -> None:
        """Register *python_type*; the parser defaults to value coercion."""
        if parser is None:

            def parser(text: str, _t: type[Any] = python_type) -> Any:
                return coerce_value(text, _t)

        self._types[python_type] = BoundType(python_type, parser)

    def register_all(self, *python_types: type[Any]) -> None:
        for t in python_types:
            self.register(t)

    def unregister(self, python_type: type[Any]) -> None:
        self._types.pop(python_type, None)

    # -- look-up -------------------------------------------------------------

    def get(self, python_type: type[Any] | None) -> BoundType | None:
        """Return the registration for *python_type* or ``None``."""
        if not isinstance(python_type, type):
            return None
        for base in python_type.__mro__:
            bound = self._types.get(base)
            if bound is not None:
                return bound
        return None

    def has(self, python_type: type[Any] | None) -> bool:
        return self.get(python_type) is not None

    @property
    def supported_types(self) -> set[type[Any]]:
        return set(self._types.keys())


def _parse_datetime(text: str) -> datetime.datetime:
    return datetime.datetime.fromisoformat(text.strip().replace("Z", "+00:00"))


def build_default_bound_registry() -> BoundTypeRegistry:
    """Create a registry with every built-in bound type."""
    registry = BoundTypeRegistry()
    registry.register_all(int, float, Decimal, datetime.date, datetime.time)
    registry.register(datetime.datetime, _parse_datetime)
    # Single characters and strings order lexically
    registry.register(str, str.strip)
    return registry


DEFAULT_BOUND_REGISTRY: BoundTypeRegistry = build_default_bound_registry()
