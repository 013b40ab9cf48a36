"""
Clause compilation strategy.

Provides the ``ClauseCompiler`` interface and a registry keyed by
:class:`ClauseKind`.  Each backend ships one compiler per clause kind and
may replace any of them by re-registering.

A compiler returns ``None`` when the clause cannot be expressed for the
property (e.g. the value does not coerce to the property's type); the
engine then leaves the query unchanged for that property.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from .coercion import coerce_value, widen_value

if TYPE_CHECKING:
    from .clauses import Clause, ClauseKind
    from .options import FilterOptions
    from .properties import EntityProperty

P = TypeVar("P")


class ClauseCompiler(ABC, Generic[P]):
    """
    Strategy interface turning one clause into a backend predicate.
    """

    @property
    @abstractmethod
    def kind(self) -> ClauseKind:
        """The clause kind this strategy handles."""
        ...

    @abstractmethod
    def compile(
        self,
        prop: EntityProperty,
        clause: Any,
        options: FilterOptions,
    ) -> P | None:
        """
        Build the predicate for *clause* against *prop*.

        Returns:
            The backend predicate, or ``None`` for no constraint.
        """
        ...

    @staticmethod
    def coerce(prop: EntityProperty, value: Any) -> Any:
        """
        Convert *value* to the property's underlying type.

        Raises:
            CoercionError: If the conversion fails.
        """
        return coerce_value(value, prop.python_type)

    @staticmethod
    def widen(prop: EntityProperty, value: Any) -> Any:
        """
        Convert *value* to the property's type where that is lossless.

        Values that do not convert are returned unchanged and compared
        as given.
        """
        return widen_value(value, prop.python_type)


class ClauseCompilerRegistry(Generic[P]):
    """
    Registry of ``ClauseCompiler`` instances keyed by :class:`ClauseKind`.
    """

    def __init__(self) -> None:
        self._compilers: dict[ClauseKind, ClauseCompiler[P]] = {}

    def register(self, compiler: ClauseCompiler[P]) -> None:
        self._compilers[compiler.kind] = compiler

    def register_all(self, *compilers: ClauseCompiler[P]) -> None:
        for c in compilers:
            self.register(c)

    def unregister(self, kind: ClauseKind) -> None:
        self._compilers.pop(kind, None)

    def get(self, kind: ClauseKind) -> ClauseCompiler[P] | None:
        return self._compilers.get(kind)

    def has(self, kind: ClauseKind) -> bool:
        return kind in self._compilers

    @property
    def supported_kinds(self) -> set[ClauseKind]:
        return set(self._compilers.keys())

    def compile(
        self,
        prop: EntityProperty,
        clause: Clause,
        options: FilterOptions,
    ) -> P | None:
        """
        Look up the compiler for the clause's kind and apply it.

        Raises:
            ValueError: If no compiler is registered for the kind.
        """
        compiler = self.get(clause.kind)
        if compiler is None:
            raise ValueError(f"No compiler registered for clause kind: {clause.kind}")
        return compiler.compile(prop, clause, options)
