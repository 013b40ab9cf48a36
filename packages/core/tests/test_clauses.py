"""Tests for clause classification."""

from __future__ import annotations

import logging
from decimal import Decimal

import pytest
from sample_entities import Version

from propfilter_core.clauses import (
    ClauseKind,
    EqualityClause,
    MembershipClause,
    RangeClause,
    classify,
    is_membership_type,
    is_range_type,
)
from propfilter_core.exceptions import UnsupportedRangeTypeError
from propfilter_core.options import FilterOptions
from propfilter_core.ranges import Range


@pytest.mark.parametrize(
    "declared",
    [list, tuple, set, frozenset, list[int], tuple[str, ...], set[int]],
)
def test_collections_are_membership_types(declared):
    assert is_membership_type(declared)


@pytest.mark.parametrize("declared", [str, bytes, bytearray, int, Decimal, Range, Range[int]])
def test_scalars_strings_and_ranges_are_not_membership_types(declared):
    assert not is_membership_type(declared)


def test_range_types():
    assert is_range_type(Range)
    assert is_range_type(Range[Decimal])
    assert not is_range_type(int)


class TestClassify:
    def test_scalar_is_equality(self, registry):
        clause = classify("first_name", str, "Tim", registry=registry)
        assert clause == EqualityClause("Tim")
        assert clause.kind is ClauseKind.EQUALITY

    def test_string_is_never_membership(self, registry):
        assert classify("favorite_letter", str, "ab", registry=registry) == EqualityClause("ab")

    @pytest.mark.parametrize("values", [[5], (5,), {5}])
    def test_single_element_collection_becomes_equality(self, registry, values):
        assert classify("favorite_number", type(values), values, registry=registry) == (
            EqualityClause(5)
        )

    def test_single_element_optimization_can_be_disabled(self, registry):
        options = FilterOptions(single_value_optimization=False)
        clause = classify("favorite_number", list, [5], registry=registry, options=options)
        assert clause == MembershipClause((5,))

    def test_single_none_element_stays_membership(self, registry):
        clause = classify("favorite_number", list, [None], registry=registry)
        assert clause == MembershipClause((None,))

    def test_multiple_elements_are_membership(self, registry):
        clause = classify("favorite_number", list[int], [1, 2, 3], registry=registry)
        assert clause == MembershipClause((1, 2, 3))
        assert clause.kind is ClauseKind.MEMBERSHIP

    def test_empty_collection_is_membership(self, registry):
        assert classify("favorite_number", list, [], registry=registry) == MembershipClause(())

    def test_unsized_iterable_is_not_optimized(self, registry):
        from collections.abc import Iterable

        clause = classify("favorite_number", Iterable[int], iter([5]), registry=registry)
        assert clause == MembershipClause((5,))

    def test_declared_iterable_with_scalar_value_is_skipped(self, registry):
        assert classify("favorite_number", list, 5, registry=registry) is None

    def test_range_with_registered_bound(self, registry):
        rng = Range.closed(Decimal("4.5"), Decimal("5.0"))
        clause = classify("rating", Range[Decimal], rng, registry=registry)
        assert isinstance(clause, RangeClause)
        assert clause.range is rng
        assert clause.bound_type.python_type is Decimal
        assert clause.kind is ClauseKind.RANGE

    def test_unbounded_range_of_declared_type_contributes_nothing(self, registry):
        clause = classify("rating", Range[Decimal], Range(), registry=registry)
        assert clause is None

    def test_unbounded_range_contributes_nothing(self, registry):
        rng = Range(value_type=int)
        assert classify("favorite_number", Range[int], rng, registry=registry) is None

    def test_unregistered_range_type_is_skipped_with_warning(self, registry, caplog):
        rng = Range(Version(1), Version(2))
        with caplog.at_level(logging.WARNING, logger="propfilter_core.clauses"):
            assert classify("version", Range[Version], rng, registry=registry) is None
        assert "version" in caplog.text
        assert "Version" in caplog.text

    def test_unregistered_range_type_raises_in_strict_mode(self, registry):
        rng = Range(Version(1), Version(2))
        with pytest.raises(UnsupportedRangeTypeError) as exc_info:
            classify(
                "version",
                Range[Version],
                rng,
                registry=registry,
                options=FilterOptions().with_strict(),
            )
        assert exc_info.value.field == "version"

    def test_registering_bound_type_enables_range(self, registry):
        registry.register(Version)
        clause = classify("version", Range[Version], Range(Version(1)), registry=registry)
        assert isinstance(clause, RangeClause)

    def test_declared_range_with_non_range_value_is_skipped(self, registry):
        assert classify("rating", Range[Decimal], "[1,2]", registry=registry) is None

    def test_untyped_unbounded_range_is_ignored_in_strict_mode(self, registry, caplog):
        strict = FilterOptions(strict=True)
        with caplog.at_level(logging.DEBUG, logger="propfilter_core.clauses"):
            assert classify("rating", Range, Range(), registry=registry, options=strict) is None
        assert not [r for r in caplog.records if r.levelno >= logging.WARNING]
        assert "no bounds" in caplog.text
