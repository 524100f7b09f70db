"""
app/services/aggregation_service.py

Aggregation layer for the inventory dashboard.

Translates parsed InventoryRow values into the derived views the
presentation layer renders:

    category distribution   – product count per ABC classification
    category sales          – total and average sold amount per classification
    rotation                – volume sold over stock held per subcategory
    top products            – highest sold amounts, plus their category mix

Pass design
-----------
Every pass builds its own ``key -> accumulator`` mapping in one traversal,
then converts it to a list and sorts it. Nothing is shared between passes
and nothing survives a call, so the same rows always produce the same views.

Per-row anomalies never abort a pass. A missing classification falls into
the unclassified bucket, a missing subcategory drops the row from rotation,
and an amount that is not a number is left out of sums and rankings while
the row itself is still counted.

Formula application lives in :mod:`kpi.inventory`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Final, Iterable, Sequence

from app.config import DEFAULT_UNCLASSIFIED_LABEL, InventoryFieldNames, get_dashboard_settings
from app.domain.inventory import (
    CategoryDistributionEntry,
    CategorySalesEntry,
    DashboardSnapshot,
    InventoryRow,
    RotationEntry,
    TopProductEntry,
)
from kpi.inventory import CategorySalesFormula, RotationIndexFormula

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

UPSTREAM_NULL_LABELS: Final[frozenset[str]] = frozenset({"null", "undefined"})
"""Classification codes that are textual null artifacts of an upstream export."""

DEFAULT_TOP_PRODUCTS_LIMIT: Final[int] = 20
DEFAULT_ROTATION_MIN_PRODUCTS: Final[int] = 5
DEFAULT_ROTATION_CHART_SIZE: Final[int] = 10


# ---------------------------------------------------------------------------
# Accumulators
# ---------------------------------------------------------------------------


@dataclass
class _SalesAccumulator:
    count: int = 0
    total_sales: float = 0.0


@dataclass
class _RotationAccumulator:
    count: int = 0
    total_volume: float = 0.0
    total_stock: float = 0.0


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class InventoryAggregationService:
    """
    Computes the dashboard views from a sequence of inventory rows.

    All methods are pure with respect to their arguments and never raise
    on malformed row values.

    Parameters
    ----------
    fields:
        Header names of the columns to read.
    unclassified_label:
        Bucket name used for rows without a classification code.
    top_products_limit:
        Length of the top-products ranking.
    rotation_min_products:
        A subcategory needs strictly more products than this to be reported.
    """

    def __init__(
        self,
        *,
        fields: InventoryFieldNames | None = None,
        unclassified_label: str = DEFAULT_UNCLASSIFIED_LABEL,
        top_products_limit: int = DEFAULT_TOP_PRODUCTS_LIMIT,
        rotation_min_products: int = DEFAULT_ROTATION_MIN_PRODUCTS,
        sales_formula: CategorySalesFormula | None = None,
        rotation_formula: RotationIndexFormula | None = None,
    ) -> None:
        self._fields = fields or InventoryFieldNames()
        self._unclassified = unclassified_label
        self._top_limit = max(1, top_products_limit)
        self._rotation_min_products = max(0, rotation_min_products)
        self._sales_formula = sales_formula or CategorySalesFormula()
        self._rotation_formula = rotation_formula or RotationIndexFormula()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def aggregate(self, rows: Sequence[InventoryRow]) -> DashboardSnapshot:
        """
        Run every pass over *rows* and bundle the results.
        """

        top_products = self.top_products(rows)
        snapshot = DashboardSnapshot(
            distribution=tuple(self.category_distribution(rows)),
            category_sales=tuple(self.category_sales(rows)),
            rotation=tuple(self.rotation(rows)),
            top_products=tuple(top_products),
            top_products_breakdown=tuple(self.top_products_breakdown(top_products)),
            row_count=len(rows),
        )
        logger.debug(
            "aggregate rows=%d → categories=%d rotation=%d top=%d",
            snapshot.row_count,
            len(snapshot.distribution),
            len(snapshot.rotation),
            len(snapshot.top_products),
        )
        return snapshot

    def category_distribution(
        self,
        rows: Iterable[InventoryRow],
    ) -> list[CategoryDistributionEntry]:
        """
        Count products per classification bucket.

        Rows without a code count toward the unclassified bucket. Buckets
        whose code is literally ``"null"`` or ``"undefined"`` are dropped from
        the output. Entries keep first-seen order.
        """

        counts: dict[str, int] = {}
        for row in rows:
            bucket = self._bucket(row)
            counts[bucket] = counts.get(bucket, 0) + 1

        return [
            CategoryDistributionEntry(category=category, product_count=count)
            for category, count in counts.items()
            if category not in UPSTREAM_NULL_LABELS
        ]

    def category_sales(self, rows: Iterable[InventoryRow]) -> list[CategorySalesEntry]:
        """
        Total and average sold amount per classification bucket.

        Every row counts toward its bucket; only valid amounts are summed.
        Sorted by ``average_sales`` descending.
        """

        accumulators: dict[str, _SalesAccumulator] = {}
        invalid_amounts = 0
        for row in rows:
            acc = accumulators.setdefault(self._bucket(row), _SalesAccumulator())
            acc.count += 1
            amount = row.number(self._fields.amount)
            if amount.is_valid:
                acc.total_sales += amount.value  # type: ignore[operator]
            else:
                invalid_amounts += 1

        entries: list[CategorySalesEntry] = []
        for category, acc in accumulators.items():
            if category in UPSTREAM_NULL_LABELS:
                continue
            metrics = self._sales_formula.calculate(
                {"product_count": acc.count, "total_sales": acc.total_sales}
            )
            entries.append(
                CategorySalesEntry(
                    category=category,
                    product_count=acc.count,
                    total_sales=metrics["total_sales"],
                    average_sales=metrics["average_sales"],
                )
            )

        entries.sort(key=lambda entry: entry.average_sales, reverse=True)
        logger.debug(
            "category_sales buckets=%d rows_without_valid_amount=%d",
            len(entries),
            invalid_amounts,
        )
        return entries

    def rotation(self, rows: Iterable[InventoryRow]) -> list[RotationEntry]:
        """
        Rotation index per subcategory.

        Rows without a subcategory are skipped. Missing or invalid volume and
        stock count as zero. Only subcategories with more than
        ``rotation_min_products`` products and a positive index are kept,
        sorted by index descending.
        """

        accumulators: dict[str, _RotationAccumulator] = {}
        for row in rows:
            subcategory = row.text(self._fields.subcategory)
            if not subcategory.is_present:
                continue

            acc = accumulators.setdefault(subcategory.value, _RotationAccumulator())  # type: ignore[arg-type]
            acc.count += 1
            acc.total_volume += row.number(self._fields.volume).or_zero()
            acc.total_stock += row.number(self._fields.stock).or_zero()

        entries: list[RotationEntry] = []
        for subcategory, acc in accumulators.items():
            metrics = self._rotation_formula.calculate(
                {"total_volume": acc.total_volume, "total_stock": acc.total_stock}
            )
            rotation_index = metrics["rotation_index"]
            if acc.count <= self._rotation_min_products or rotation_index <= 0:
                continue
            entries.append(
                RotationEntry(
                    subcategory=subcategory,
                    rotation_index=rotation_index,
                    product_count=acc.count,
                )
            )

        entries.sort(key=lambda entry: entry.rotation_index, reverse=True)
        logger.debug(
            "rotation subcategories=%d retained=%d",
            len(accumulators),
            len(entries),
        )
        return entries

    def top_products(self, rows: Iterable[InventoryRow]) -> list[TopProductEntry]:
        """
        Products with the highest sold amount, best first.

        Rows whose amount is not a valid number are not eligible. The result
        holds at most ``top_products_limit`` entries.
        """

        candidates: list[TopProductEntry] = []
        for row in rows:
            amount = row.number(self._fields.amount)
            if not amount.is_valid:
                continue
            candidates.append(
                TopProductEntry(
                    code=row.raw(self._fields.code),
                    name=row.raw(self._fields.name),
                    category=row.text(self._fields.classification).value,
                    subcategory=row.text(self._fields.subcategory).value,
                    amount=amount.value,  # type: ignore[arg-type]
                    volume=row.number(self._fields.volume).or_zero(),
                )
            )

        candidates.sort(key=lambda entry: entry.amount, reverse=True)
        return candidates[: self._top_limit]

    def top_products_breakdown(
        self,
        top_products: Iterable[TopProductEntry],
    ) -> list[CategoryDistributionEntry]:
        """
        Count the ranked products by classification code.

        Absent codes count as unclassified. Unlike
        :meth:`category_distribution`, no bucket is filtered out.
        """

        counts: dict[str, int] = {}
        for product in top_products:
            category = product.category or self._unclassified
            counts[category] = counts.get(category, 0) + 1

        return [
            CategoryDistributionEntry(category=category, product_count=count)
            for category, count in counts.items()
        ]

    # ------------------------------------------------------------------
    # Convenience: rotation chart slices
    # ------------------------------------------------------------------

    @staticmethod
    def highest_rotation(
        entries: Sequence[RotationEntry],
        limit: int = DEFAULT_ROTATION_CHART_SIZE,
    ) -> list[RotationEntry]:
        """
        The *limit* fastest-rotating subcategories, fastest first.

        *entries* must already be sorted as returned by :meth:`rotation`.
        """

        return list(entries[: max(0, limit)])

    @staticmethod
    def lowest_rotation(
        entries: Sequence[RotationEntry],
        limit: int = DEFAULT_ROTATION_CHART_SIZE,
    ) -> list[RotationEntry]:
        """
        The *limit* slowest-rotating subcategories, slowest first.

        *entries* must already be sorted as returned by :meth:`rotation`.
        """

        if limit <= 0:
            return []
        return list(reversed(entries[-limit:]))

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _bucket(self, row: InventoryRow) -> str:
        return row.text(self._fields.classification).or_default(self._unclassified)


@lru_cache(maxsize=1)
def get_aggregation_service() -> InventoryAggregationService:
    """
    Build and cache the aggregation service with env-driven settings.
    """

    settings = get_dashboard_settings()
    return InventoryAggregationService(
        fields=settings.fields,
        unclassified_label=settings.unclassified_label,
        top_products_limit=settings.top_products_limit,
        rotation_min_products=settings.rotation_min_products,
    )
