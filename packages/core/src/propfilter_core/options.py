"""Behavioural switches for filter application."""

from __future__ import annotations

from dataclasses import dataclass, replace


@dataclass(frozen=True)
class FilterOptions:
    """
    Immutable filter configuration.

    Attributes:
        strict: Raise :class:`UnsupportedRangeTypeError` for ranges whose
            bound type is not registered, instead of skipping the
            property with a warning.
        single_value_optimization: Rewrite a one-element sized collection
            into an equality test against its element.
        guard_nullable_membership: Prefix membership tests on nullable
            properties with an ``IS NOT NULL`` check.
    """

    strict: bool = False
    single_value_optimization: bool = True
    guard_nullable_membership: bool = True

    def with_strict(self, strict: bool = True) -> FilterOptions:
        """Return a copy with strict mode toggled."""
        return replace(self, strict=strict)


DEFAULT_OPTIONS = FilterOptions()
