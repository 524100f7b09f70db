"""
tests/test_aggregation_service.py

Pytest unit tests for InventoryAggregationService.

All tests are pure Python — rows are built in memory, no I/O.
Every assertion is deterministic: given the same rows, the same
views must be produced every time.

Coverage
--------
- Category distribution, unclassified bucket and textual-null filter
- Category sales totals, averages and ordering
- Rotation index, product-count threshold and zero-stock guard
- Top products ranking, truncation and category breakdown
- Rotation chart slices
- Idempotence of the combined snapshot
"""

from __future__ import annotations

from typing import Any

import pytest

from app.config import InventoryFieldNames
from app.domain.inventory import InventoryRow, RotationEntry, TopProductEntry
from app.services.aggregation_service import InventoryAggregationService


# ---------------------------------------------------------------------------
# Helpers & fixtures
# ---------------------------------------------------------------------------


def _row(**values: Any) -> InventoryRow:
    aliases = {
        "abc": "ABC",
        "amount": "Importe Vendido",
        "subcategory": "Subcategoría",
        "stock": "Stock",
        "volume": "Volumen Vendido",
        "code": "Material",
        "name": "Descripción",
    }
    return InventoryRow({aliases[key]: value for key, value in values.items()})


def _rotation_rows(subcategory: str, count: int, volume: Any, stock: Any) -> list[InventoryRow]:
    return [_row(subcategory=subcategory, volume=volume, stock=stock) for _ in range(count)]


@pytest.fixture()
def svc() -> InventoryAggregationService:
    """Fresh aggregation service with default settings for each test."""
    return InventoryAggregationService()


@pytest.fixture()
def example_rows() -> list[InventoryRow]:
    return [
        _row(abc="A", amount="100,00"),
        _row(abc="A", amount="50,00"),
        _row(abc="B", amount="200,00"),
    ]


# ---------------------------------------------------------------------------
# Category distribution
# ---------------------------------------------------------------------------


class TestCategoryDistribution:
    def test_counts_per_category(
        self, svc: InventoryAggregationService, example_rows: list[InventoryRow]
    ) -> None:
        result = svc.category_distribution(example_rows)
        assert [(e.category, e.product_count) for e in result] == [("A", 2), ("B", 1)]

    def test_missing_code_is_unclassified(self, svc: InventoryAggregationService) -> None:
        rows = [_row(abc="A"), _row(amount="1,00"), _row(abc=None), _row(abc="  ")]
        result = {e.category: e.product_count for e in svc.category_distribution(rows)}
        assert result == {"A": 1, "unclassified": 3}

    def test_no_row_dropped_without_textual_nulls(self, svc: InventoryAggregationService) -> None:
        rows = [_row(abc=code) for code in ["A", "B", None, "C", "D", "D", None]]
        total = sum(e.product_count for e in svc.category_distribution(rows))
        assert total == len(rows)

    @pytest.mark.parametrize("artifact", ["null", "undefined"])
    def test_textual_null_buckets_are_dropped(
        self, svc: InventoryAggregationService, artifact: str
    ) -> None:
        rows = [_row(abc="A"), _row(abc=artifact), _row(abc=None)]
        categories = [e.category for e in svc.category_distribution(rows)]
        assert categories == ["A", "unclassified"]

    def test_numeric_codes_are_stringified(self, svc: InventoryAggregationService) -> None:
        result = svc.category_distribution([_row(abc=1), _row(abc=1)])
        assert result[0].category == "1"
        assert result[0].product_count == 2

    def test_custom_unclassified_label(self) -> None:
        svc = InventoryAggregationService(unclassified_label="Sin clasificar")
        result = svc.category_distribution([_row(abc=None)])
        assert result[0].category == "Sin clasificar"

    def test_empty_rows(self, svc: InventoryAggregationService) -> None:
        assert svc.category_distribution([]) == []


# ---------------------------------------------------------------------------
# Category sales
# ---------------------------------------------------------------------------


class TestCategorySales:
    def test_example_sorted_by_average(
        self, svc: InventoryAggregationService, example_rows: list[InventoryRow]
    ) -> None:
        result = svc.category_sales(example_rows)

        assert [e.category for e in result] == ["B", "A"]
        b, a = result
        assert b.product_count == 1
        assert b.total_sales == pytest.approx(200.0)
        assert b.average_sales == pytest.approx(200.0)
        assert a.product_count == 2
        assert a.total_sales == pytest.approx(150.0)
        assert a.average_sales == pytest.approx(75.0)

    def test_invalid_amount_counts_but_does_not_sum(self, svc: InventoryAggregationService) -> None:
        rows = [_row(abc="A", amount="abc"), _row(abc="A", amount="10,00"), _row(abc="A")]
        (entry,) = svc.category_sales(rows)
        assert entry.product_count == 3
        assert entry.total_sales == pytest.approx(10.0)
        assert entry.average_sales == pytest.approx(10.0 / 3)

    def test_numeric_amounts_used_as_is(self, svc: InventoryAggregationService) -> None:
        (entry,) = svc.category_sales([_row(abc="C", amount=12.5), _row(abc="C", amount=7)])
        assert entry.total_sales == pytest.approx(19.5)

    def test_amount_with_trailing_text_is_summed(self, svc: InventoryAggregationService) -> None:
        rows = [_row(abc="B", amount="$1,234.56"), _row(abc="B", amount="12,5 MXN")]
        (entry,) = svc.category_sales(rows)
        assert entry.total_sales == pytest.approx(1.234 + 12.5)
        assert [p.amount for p in svc.top_products(rows)] == pytest.approx([12.5, 1.234])

    def test_all_invalid_amounts_average_zero(self, svc: InventoryAggregationService) -> None:
        (entry,) = svc.category_sales([_row(abc="D", amount="n/a")])
        assert entry.total_sales == 0.0
        assert entry.average_sales == 0.0

    def test_average_matches_total_over_count(self, svc: InventoryAggregationService) -> None:
        rows = [
            _row(abc=code, amount=amount)
            for code, amount in [("A", "1,5"), ("B", "$ 3,25"), ("A", 8), ("C", "x"), ("B", "0,75")]
        ]
        for entry in svc.category_sales(rows):
            assert entry.average_sales == pytest.approx(entry.total_sales / entry.product_count)

    @pytest.mark.parametrize("artifact", ["null", "undefined"])
    def test_textual_null_buckets_are_dropped(
        self, svc: InventoryAggregationService, artifact: str
    ) -> None:
        rows = [_row(abc=artifact, amount="999,00"), _row(abc="A", amount="1,00")]
        assert [e.category for e in svc.category_sales(rows)] == ["A"]

    def test_ties_keep_first_seen_order(self, svc: InventoryAggregationService) -> None:
        rows = [_row(abc="C", amount=10), _row(abc="A", amount=10), _row(abc="B", amount=10)]
        assert [e.category for e in svc.category_sales(rows)] == ["C", "A", "B"]


# ---------------------------------------------------------------------------
# Rotation
# ---------------------------------------------------------------------------


class TestRotation:
    def test_rotation_index_formula(self, svc: InventoryAggregationService) -> None:
        rows = _rotation_rows("Lácteos", 6, volume=10, stock="2,5")
        (entry,) = svc.rotation(rows)
        assert entry.subcategory == "Lácteos"
        assert entry.product_count == 6
        assert entry.rotation_index == pytest.approx(60 / 15)

    def test_small_subcategory_never_reported(self, svc: InventoryAggregationService) -> None:
        rows = _rotation_rows("Pan", 3, volume=1000, stock=1)
        assert svc.rotation(rows) == []

    def test_exactly_threshold_is_excluded(self, svc: InventoryAggregationService) -> None:
        rows = _rotation_rows("Cereal", 5, volume=10, stock=1)
        assert svc.rotation(rows) == []

    def test_zero_stock_yields_zero_and_is_excluded(self, svc: InventoryAggregationService) -> None:
        rows = _rotation_rows("Shampoos", 8, volume=10, stock=0)
        assert svc.rotation(rows) == []

    def test_zero_volume_is_excluded(self, svc: InventoryAggregationService) -> None:
        rows = _rotation_rows("Cerveza", 8, volume=0, stock=4)
        assert svc.rotation(rows) == []

    def test_rows_without_subcategory_are_skipped(self, svc: InventoryAggregationService) -> None:
        rows = _rotation_rows("Tortillas", 6, volume=2, stock=1)
        rows += [_row(volume=10_000, stock=1), _row(subcategory="", volume=10_000, stock=1)]
        (entry,) = svc.rotation(rows)
        assert entry.product_count == 6
        assert entry.rotation_index == pytest.approx(2.0)

    def test_missing_and_invalid_values_count_as_zero(self, svc: InventoryAggregationService) -> None:
        rows = _rotation_rows("Aguas", 4, volume=6, stock=2)
        rows += [_row(subcategory="Aguas", stock=2), _row(subcategory="Aguas", volume="x", stock="y")]
        (entry,) = svc.rotation(rows)
        assert entry.product_count == 6
        assert entry.rotation_index == pytest.approx(24 / 10)

    def test_comma_decimal_volume(self, svc: InventoryAggregationService) -> None:
        rows = _rotation_rows("Quesos", 6, volume="1,5", stock=3)
        (entry,) = svc.rotation(rows)
        assert entry.rotation_index == pytest.approx(0.5)

    def test_sorted_descending(self, svc: InventoryAggregationService) -> None:
        rows = (
            _rotation_rows("Lenta", 6, volume=1, stock=4)
            + _rotation_rows("Rápida", 6, volume=9, stock=1)
            + _rotation_rows("Media", 6, volume=2, stock=1)
        )
        assert [e.subcategory for e in svc.rotation(rows)] == ["Rápida", "Media", "Lenta"]

    def test_invariants_hold(self, svc: InventoryAggregationService) -> None:
        rows = (
            _rotation_rows("A", 2, volume=5, stock=1)
            + _rotation_rows("B", 7, volume=5, stock=1)
            + _rotation_rows("C", 9, volume=0, stock=1)
            + _rotation_rows("D", 12, volume=3, stock="1,5")
        )
        for entry in svc.rotation(rows):
            assert entry.product_count > 5
            assert entry.rotation_index > 0

    def test_custom_threshold(self) -> None:
        svc = InventoryAggregationService(rotation_min_products=1)
        rows = _rotation_rows("Pan", 2, volume=4, stock=2)
        (entry,) = svc.rotation(rows)
        assert entry.rotation_index == pytest.approx(2.0)


# ---------------------------------------------------------------------------
# Top products
# ---------------------------------------------------------------------------


class TestTopProducts:
    def test_truncates_to_twenty(self, svc: InventoryAggregationService) -> None:
        rows = [_row(code=i, amount=f"{i},00") for i in range(1, 26)]
        result = svc.top_products(rows)
        assert len(result) == 20
        assert result[0].amount == pytest.approx(25.0)
        assert result[-1].amount == pytest.approx(6.0)

    def test_sorted_non_increasing(self, svc: InventoryAggregationService) -> None:
        amounts = ["5,5", 100, "12", "$ 7,25", 0, "99,99", -3]
        result = svc.top_products([_row(amount=a) for a in amounts])
        values = [e.amount for e in result]
        assert values == sorted(values, reverse=True)

    def test_invalid_amounts_are_not_eligible(self, svc: InventoryAggregationService) -> None:
        rows = [_row(code="ok", amount="10,00"), _row(code="bad", amount="n/a"), _row(code="none")]
        result = svc.top_products(rows)
        assert [e.code for e in result] == ["ok"]

    def test_length_is_min_of_limit_and_valid(self, svc: InventoryAggregationService) -> None:
        rows = [_row(amount=i) for i in range(7)] + [_row(amount="x")] * 3
        assert len(svc.top_products(rows)) == 7

    def test_entry_fields(self, svc: InventoryAggregationService) -> None:
        rows = [
            _row(
                code=1001,
                name="Leche entera 1L",
                abc="C",
                subcategory="Lácteos",
                amount="$ 1500,50",
                volume="12,5",
            )
        ]
        (entry,) = svc.top_products(rows)
        assert entry == TopProductEntry(
            code=1001,
            name="Leche entera 1L",
            category="C",
            subcategory="Lácteos",
            amount=1500.5,
            volume=12.5,
        )

    def test_missing_category_and_volume(self, svc: InventoryAggregationService) -> None:
        (entry,) = svc.top_products([_row(amount=5)])
        assert entry.category is None
        assert entry.volume == 0.0

    def test_ties_keep_input_order(self, svc: InventoryAggregationService) -> None:
        rows = [_row(code="first", amount=10), _row(code="second", amount="10,0")]
        assert [e.code for e in svc.top_products(rows)] == ["first", "second"]

    def test_custom_limit(self) -> None:
        svc = InventoryAggregationService(top_products_limit=3)
        rows = [_row(amount=i) for i in range(10)]
        assert [e.amount for e in svc.top_products(rows)] == [9, 8, 7]


class TestTopProductsBreakdown:
    def test_counts_by_category_with_unclassified(self, svc: InventoryAggregationService) -> None:
        rows = [
            _row(abc="C", amount=30),
            _row(abc=None, amount=20),
            _row(abc="A", amount=10),
            _row(abc="C", amount=5),
        ]
        breakdown = svc.top_products_breakdown(svc.top_products(rows))
        assert [(e.category, e.product_count) for e in breakdown] == [
            ("C", 2),
            ("unclassified", 1),
            ("A", 1),
        ]

    def test_textual_null_is_kept(self, svc: InventoryAggregationService) -> None:
        breakdown = svc.top_products_breakdown(svc.top_products([_row(abc="null", amount=1)]))
        assert breakdown[0].category == "null"

    def test_only_counts_the_truncated_list(self) -> None:
        svc = InventoryAggregationService(top_products_limit=2)
        rows = [_row(abc="A", amount=1), _row(abc="B", amount=3), _row(abc="B", amount=2)]
        breakdown = svc.top_products_breakdown(svc.top_products(rows))
        assert [(e.category, e.product_count) for e in breakdown] == [("B", 2)]


# ---------------------------------------------------------------------------
# Rotation chart slices
# ---------------------------------------------------------------------------


class TestRotationSlices:
    @pytest.fixture()
    def entries(self) -> list[RotationEntry]:
        return [
            RotationEntry(subcategory=f"S{i}", rotation_index=float(15 - i), product_count=6)
            for i in range(15)
        ]

    def test_highest(self, entries: list[RotationEntry]) -> None:
        result = InventoryAggregationService.highest_rotation(entries)
        assert [e.subcategory for e in result] == [f"S{i}" for i in range(10)]

    def test_lowest_is_slowest_first(self, entries: list[RotationEntry]) -> None:
        result = InventoryAggregationService.lowest_rotation(entries, limit=3)
        assert [e.subcategory for e in result] == ["S14", "S13", "S12"]

    def test_lowest_with_short_list(self, entries: list[RotationEntry]) -> None:
        result = InventoryAggregationService.lowest_rotation(entries[:2])
        assert [e.subcategory for e in result] == ["S1", "S0"]

    def test_non_positive_limit(self, entries: list[RotationEntry]) -> None:
        assert InventoryAggregationService.lowest_rotation(entries, limit=0) == []
        assert InventoryAggregationService.highest_rotation(entries, limit=0) == []


# ---------------------------------------------------------------------------
# Snapshot
# ---------------------------------------------------------------------------


class TestAggregate:
    def test_snapshot_bundles_every_view(
        self, svc: InventoryAggregationService, example_rows: list[InventoryRow]
    ) -> None:
        snapshot = svc.aggregate(example_rows)
        assert snapshot.row_count == 3
        assert len(snapshot.distribution) == 2
        assert [e.category for e in snapshot.category_sales] == ["B", "A"]
        assert snapshot.rotation == ()
        assert [e.amount for e in snapshot.top_products] == [200.0, 100.0, 50.0]
        assert [(e.category, e.product_count) for e in snapshot.top_products_breakdown] == [
            ("B", 1),
            ("A", 2),
        ]

    def test_aggregate_is_idempotent(self, svc: InventoryAggregationService) -> None:
        rows = [
            _row(abc=code, amount=f"{i},5", subcategory=f"S{i % 2}", volume=i, stock="2,0")
            for i, code in enumerate(["A", "B", None, "C", "D", "A", "B", "C", "D", None, "A", "B", "C"])
        ]
        assert svc.aggregate(rows) == svc.aggregate(rows)

    def test_empty_input(self, svc: InventoryAggregationService) -> None:
        snapshot = svc.aggregate([])
        assert snapshot.is_empty
        assert snapshot.top_products == ()

    def test_custom_field_names(self) -> None:
        fields = InventoryFieldNames(classification="Clase", amount="Venta")
        svc = InventoryAggregationService(fields=fields)
        rows = [InventoryRow({"Clase": "A", "Venta": "3,0"})]
        (entry,) = svc.category_sales(rows)
        assert entry.total_sales == pytest.approx(3.0)
