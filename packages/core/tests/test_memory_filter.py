"""End-to-end filtering of in-memory objects."""

from __future__ import annotations

import datetime
from dataclasses import dataclass
from decimal import Decimal

import pytest
from pydantic import BaseModel
from sample_entities import UTC, Person, Version

from propfilter_core.clauses import ClauseKind
from propfilter_core.engine import FilterEngine
from propfilter_core.exceptions import UnsupportedRangeTypeError
from propfilter_core.matching import index_properties
from propfilter_core.memory import (
    MemoryBackend,
    MemoryEqualityCompiler,
    MemoryQuery,
    apply_filter,
    build_default_memory_compilers,
)
from propfilter_core.options import FilterOptions
from propfilter_core.properties import describe_entity
from propfilter_core.ranges import Range


@dataclass
class PersonFilter:
    first_name: str | None = None
    favorite_number: list[int] | None = None
    rating: Range[Decimal] | None = None
    favorite_datetime_offset: Range[datetime.datetime] | None = None


class PersonSearch(BaseModel):
    favorite_letter: list[str] | None = None
    rating: Range[Decimal] | None = None


def _first_names(query):
    return [p.first_name for p in query]


def test_none_filter_returns_query_itself(people_query):
    assert apply_filter(people_query, None) is people_query


def test_empty_filter_matches_everything(people_query):
    assert _first_names(apply_filter(people_query, PersonFilter())) == ["John", "Tim"]


def test_equality_on_nullable_decimal(people_query):
    result = apply_filter(people_query, {"rating": 4.5})
    assert _first_names(result) == ["Tim"]


def test_datetime_offset_half_open_range(people_query):
    rng = Range.parse("[2010-01-01T00:00:00+00:00,2010-01-02T00:00:00+00:00)", datetime.datetime)
    result = apply_filter(people_query, PersonFilter(favorite_datetime_offset=rng))
    assert _first_names(result) == ["John"]


def test_inclusive_range_includes_bound(people_query):
    rng = Range.closed(Decimal("4.5"), Decimal("5.0"))
    assert _first_names(apply_filter(people_query, PersonFilter(rating=rng))) == ["Tim"]


def test_exclusive_range_excludes_bound(people_query):
    rng = Range(Decimal("4.5"), Decimal("5.0"), False, False)
    assert apply_filter(people_query, PersonFilter(rating=rng)).all() == []


def test_range_never_matches_null_rows(people_query):
    rng = Range.at_most(Decimal("10"))
    assert _first_names(apply_filter(people_query, PersonFilter(rating=rng))) == ["Tim"]


def test_single_element_membership(people_query):
    result = apply_filter(people_query, PersonFilter(favorite_number=[5]))
    assert _first_names(result) == ["John"]


def test_multi_element_membership(people_query):
    result = apply_filter(people_query, PersonFilter(favorite_number=[5, 10, 99]))
    assert _first_names(result) == ["John", "Tim"]


def test_empty_membership_matches_everything(people_query):
    result = apply_filter(people_query, PersonFilter(favorite_number=[]))
    assert result.count() == 2
    assert result.predicates == ()


def test_nullable_membership_excludes_null_rows():
    rows = [Person("A", favorite_number=1), Person("B"), Person("C", favorite_number=7)]
    query = MemoryQuery(rows, entity=Person)
    result = apply_filter(query, {"favorite_number": [1, None, 7]})
    assert _first_names(result) == ["A", "C"]


def test_nullable_membership_guard_can_be_disabled():
    rows = [Person("A", favorite_number=1), Person("B")]
    query = MemoryQuery(rows, entity=Person)
    options = FilterOptions(guard_nullable_membership=False)
    result = apply_filter(query, {"favorite_number": [1, None]}, options=options)
    assert _first_names(result) == ["A", "B"]


def test_property_names_match_case_insensitively(people_query):
    result = apply_filter(people_query, {"FIRST_NAME": "Tim", "Favorite_Letter": "b"})
    assert _first_names(result) == ["Tim"]


def test_unknown_properties_are_ignored(people_query):
    result = apply_filter(people_query, {"nickname": "Timmy"})
    assert result.count() == 2


def test_clauses_are_conjunctive(people_query):
    result = apply_filter(people_query, PersonFilter(first_name="John", favorite_number=[10]))
    assert result.all() == []


def test_values_are_coerced_to_property_type(people_query):
    assert _first_names(apply_filter(people_query, {"favorite_number": "10"})) == ["Tim"]


def test_uncoercible_value_skips_property(people_query):
    result = apply_filter(people_query, {"favorite_number": "abc", "first_name": "Tim"})
    assert _first_names(result) == ["Tim"]


def test_pydantic_filter_model(people_query):
    search = PersonSearch(favorite_letter=["a", "b"], rating="[4,5]")
    assert _first_names(apply_filter(people_query, search)) == ["Tim"]


def test_unregistered_range_type_is_skipped():
    @dataclass
    class Release:
        version: Version

    @dataclass
    class ReleaseFilter:
        version: Range[Version] | None = None

    query = MemoryQuery([Release(Version(1)), Release(Version(3))], entity=Release)
    f = ReleaseFilter(version=Range(Version(2)))
    assert apply_filter(query, f).count() == 2
    with pytest.raises(UnsupportedRangeTypeError):
        apply_filter(query, f, options=FilterOptions(strict=True))


def test_source_query_is_not_mutated(people_query):
    filtered = apply_filter(people_query, {"first_name": "Tim"})
    assert filtered is not people_query
    assert people_query.count() == 2
    assert filtered.count() == 1


def test_entity_inferred_from_rows(people):
    query = MemoryQuery(people)
    assert query.entity is Person
    assert _first_names(apply_filter(query, {"first_name": "John"})) == ["John"]


def test_empty_query_without_entity_is_returned_unfiltered():
    query = MemoryQuery([])
    assert apply_filter(query, {"first_name": "John"}).predicates == ()


def test_engine_plan_reports_clause_kinds(people_query):
    engine = FilterEngine(MemoryBackend())
    index = index_properties(describe_entity(Person))
    f = PersonFilter(first_name="Tim", favorite_number=[1, 2], rating=Range.at_least(Decimal(1)))
    kinds = [clause.kind for _, clause in engine.plan(index, f)]
    assert kinds == [ClauseKind.EQUALITY, ClauseKind.MEMBERSHIP, ClauseKind.RANGE]


def test_custom_compiler_replaces_default(people_query):
    class CaseInsensitiveEquality(MemoryEqualityCompiler):
        def compile(self, prop, clause, options):
            expected = str(clause.value).casefold()
            return lambda obj: str(getattr(obj, prop.name)).casefold() == expected

    compilers = build_default_memory_compilers()
    compilers.register(CaseInsensitiveEquality())
    engine = FilterEngine(MemoryBackend(compilers))
    assert _first_names(engine.apply(people_query, {"first_name": "tim"})) == ["Tim"]


def test_aware_datetime_bounds(people_query):
    rng = Range.at_least(datetime.datetime(2010, 1, 2, tzinfo=UTC))
    result = apply_filter(people_query, {"favorite_datetime_offset": rng})
    assert _first_names(result) == ["Tim"]


def test_naive_datetime_bounds_against_aware_values(people_query):
    rng = Range.parse("[2010-01-01,2010-01-02)", datetime.datetime)
    result = apply_filter(people_query, {"favorite_datetime_offset": rng})
    assert _first_names(result) == ["John"]


def test_fractional_range_on_integer_property(people_query):
    result = apply_filter(people_query, {"favorite_number": Range.closed(1.5, 3.5)})
    assert result.all() == []
    result = apply_filter(people_query, {"favorite_number": Range.closed(4.5, 5.5)})
    assert _first_names(result) == ["John"]


def test_fractional_membership_element_on_integer_property(people_query):
    result = apply_filter(people_query, {"favorite_number": [5, 7.5]})
    assert _first_names(result) == ["John"]


def test_incomparable_range_bound_matches_nothing(people_query):
    result = apply_filter(people_query, {"favorite_number": Range.closed("a", "z")})
    assert result.all() == []


def test_unbounded_range_in_strict_mode_adds_nothing(people_query):
    result = apply_filter(people_query, {"rating": Range()}, options=FilterOptions(strict=True))
    assert result.predicates == ()
