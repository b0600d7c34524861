"""Tests for usage resolution."""

from collections.abc import Callable

import pytest

from schemaguard.analysis.models import UsageReference
from schemaguard.index.builder import IdentifierIndex, IndexEntry, build_index
from schemaguard.index.resolver import (
    find_usage,
    find_usage_fuzzy,
    matches_identifier,
    usage_keys,
)
from schemaguard.metadata.models import DatabaseMetadata

ORDERS_USAGE = [
    UsageReference("relation", "public.order_summary", "view"),
    UsageReference("routine", "public.refresh_totals", "function/regular"),
    UsageReference("relation", "reporting.daily_orders", "view"),
]


class TestUsageKeys:
    """Lookup key derivation."""

    def test_given_mixed_case_names_when_keys_derived_then_quoted_form_keeps_case(self) -> None:
        assert usage_keys("Orders", "Public") == ("orders", "public.orders", '"Public"."Orders"')


class TestFindUsage:
    """Index-backed usage lookup."""

    def test_given_sales_snapshot_when_find_orders_then_hits_in_key_order(
        self, sales_snapshot: dict[str, DatabaseMetadata], sales_database: DatabaseMetadata
    ) -> None:
        """Bare name hits first, then schema-qualified, then quoted."""
        # Given
        index = build_index(sales_snapshot)

        # When
        usage = find_usage(index, sales_database, "orders", "public")

        # Then
        assert usage == ORDERS_USAGE

    def test_given_case_variants_of_lookup_when_find_then_same_results(
        self, sales_snapshot: dict[str, DatabaseMetadata], sales_database: DatabaseMetadata
    ) -> None:
        """Mixed-case lookups resolve through the normalized keys."""
        index = build_index(sales_snapshot)

        lower = find_usage(index, sales_database, "orders", "public")
        mixed = find_usage(index, sales_database, "Orders", "Public")

        assert lower
        assert [u.name for u in mixed] == ["public.order_summary", "public.refresh_totals"]
        assert set(mixed) <= set(lower)

    @pytest.mark.parametrize("identifier", ['"Public"."Orders"', "public.orders", "orders", "  ORDERS  "])
    def test_given_declared_spelling_when_bare_lookup_then_found(
        self,
        make_snapshot: Callable[..., dict[str, DatabaseMetadata]],
        identifier: str,
    ) -> None:
        """Any declared spelling of the object is found by a lowercase lookup."""
        # Given
        snapshot = make_snapshot(
            public={
                "relations": {
                    "orders": {"type": "table"},
                    "v": {"type": "view", "identifiers": [identifier]},
                }
            }
        )

        # When
        usage = find_usage(build_index(snapshot), snapshot["db"], "orders", "public")

        # Then
        assert usage == [UsageReference("relation", "public.v", "view")]

    def test_given_view_mentioning_two_spellings_when_find_then_reported_twice(
        self, make_snapshot: Callable[..., dict[str, DatabaseMetadata]]
    ) -> None:
        """Hits are unioned without deduplication."""
        snapshot = make_snapshot(
            public={"relations": {"v": {"type": "view", "identifiers": ["orders", "public.orders"]}}}
        )

        usage = find_usage(build_index(snapshot), snapshot["db"], "orders", "public")

        assert usage == [UsageReference("relation", "public.v", "view")] * 2

    def test_given_table_declaring_identifier_when_find_then_not_usage(
        self, make_snapshot: Callable[..., dict[str, DatabaseMetadata]]
    ) -> None:
        """Only views and routines count as usage."""
        snapshot = make_snapshot(
            public={"relations": {"t": {"type": "table", "identifiers": ["orders"]}}}
        )

        assert find_usage(build_index(snapshot), snapshot["db"], "orders", "public") == []

    def test_given_trigger_function_when_find_then_location_carries_kind(
        self, make_snapshot: Callable[..., dict[str, DatabaseMetadata]]
    ) -> None:
        snapshot = make_snapshot(
            public={
                "routines": {
                    "audit": [{"type": "function", "kind": "trigger", "identifiers": ["orders"]}],
                    "archive": [{"type": "procedure", "identifiers": ["orders"]}],
                    "total": [{"type": "aggregate", "identifiers": ["orders"]}],
                }
            }
        )

        usage = find_usage(build_index(snapshot), snapshot["db"], "orders", "public")

        assert usage == [
            UsageReference("routine", "public.audit", "function/trigger"),
            UsageReference("routine", "public.archive", "procedure/regular"),
        ]

    def test_given_entry_for_vanished_object_when_find_then_skipped(
        self, sales_database: DatabaseMetadata
    ) -> None:
        """An index older than the metadata never produces phantom usage."""
        # Given
        stale = IdentifierIndex(
            {
                "orders": (
                    IndexEntry("gone", "v"),
                    IndexEntry("public", "dropped_view"),
                    IndexEntry("public", "refresh_totals", "routine", 5),
                    IndexEntry("public", "order_summary"),
                )
            }
        )

        # When
        usage = find_usage(stale, sales_database, "orders", "public")

        # Then
        assert usage == [UsageReference("relation", "public.order_summary", "view")]

    def test_given_empty_index_when_find_then_no_usage(self, sales_database: DatabaseMetadata) -> None:
        assert find_usage(IdentifierIndex.empty(), sales_database, "orders", "public") == []


class TestMatchesIdentifier:
    """Pattern matcher tests."""

    @pytest.mark.parametrize(
        "identifier",
        ["orders", "ORDERS", "public.orders", '"public"."orders"', ' "Public" . "Orders" ', '"orders"'],
    )
    def test_given_spelling_of_target_when_matched_then_true(self, identifier: str) -> None:
        assert matches_identifier(identifier, "orders", "public")

    @pytest.mark.parametrize("identifier", ["orders_archive", "other.orders", "public.order", "public_orders"])
    def test_given_other_identifier_when_matched_then_false(self, identifier: str) -> None:
        assert not matches_identifier(identifier, "orders", "public")

    def test_given_regex_metacharacters_in_name_when_matched_then_literal(self) -> None:
        assert matches_identifier("a.b$c", "b$c", "a")
        assert not matches_identifier("a.bxc", "b.c", "a")


class TestFindUsageFuzzy:
    """Pattern-based scan."""

    def test_given_sales_database_when_fuzzy_find_then_same_objects_as_index(
        self, sales_database: DatabaseMetadata
    ) -> None:
        usage = find_usage_fuzzy(sales_database, "orders", "public")

        assert sorted(u.name for u in usage) == sorted(u.name for u in ORDERS_USAGE)

    def test_given_view_mentioning_two_spellings_when_fuzzy_find_then_reported_once(
        self, make_snapshot: Callable[..., dict[str, DatabaseMetadata]]
    ) -> None:
        snapshot = make_snapshot(
            public={"relations": {"v": {"type": "view", "identifiers": ["orders", "public.orders"]}}}
        )

        assert find_usage_fuzzy(snapshot["db"], "orders", "public") == [
            UsageReference("relation", "public.v", "view")
        ]

    def test_given_quoted_mixed_case_reference_when_fuzzy_find_then_over_reported(
        self, make_snapshot: Callable[..., dict[str, DatabaseMetadata]]
    ) -> None:
        """The matcher ignores case even inside quotes."""
        snapshot = make_snapshot(
            public={"relations": {"v": {"type": "view", "identifiers": ['"Orders"']}}}
        )

        assert len(find_usage_fuzzy(snapshot["db"], "orders", "public")) == 1
