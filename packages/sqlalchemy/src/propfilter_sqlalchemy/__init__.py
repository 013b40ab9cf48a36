"""SQLAlchemy backend for propfilter: filter objects as ``Select`` predicates."""

from __future__ import annotations

from .compilers import (
    DEFAULT_SQLA_COMPILERS,
    EqualityCompiler,
    MembershipCompiler,
    RangeCompiler,
    build_default_sqla_compilers,
)
from .entity import describe_model, resolve_entity
from .query import SQLAlchemyBackend, apply_filter, build_engine

__all__ = [
    "apply_filter",
    "build_engine",
    "SQLAlchemyBackend",
    "describe_model",
    "resolve_entity",
    "DEFAULT_SQLA_COMPILERS",
    "build_default_sqla_compilers",
    "EqualityCompiler",
    "MembershipCompiler",
    "RangeCompiler",
]
