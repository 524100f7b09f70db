"""
kpi/inventory.py

Inventory KPI formula implementations.

Expected inputs
---------------
CategorySalesFormula
    product_count : int
        Rows assigned to the classification bucket.
    total_sales : float
        Sum of valid sold amounts in the bucket.

RotationIndexFormula
    total_volume : float
        Sum of sold volume across the subcategory.
    total_stock : float
        Sum of stock on hand across the subcategory.

Formulas
--------
Average Sales   = total_sales / product_count
Rotation Index  = total_volume / total_stock

A zero or negative denominator yields 0.0 rather than None: both values
are plotted directly and an empty bucket reads as zero.
"""

from __future__ import annotations

from typing import Any

from kpi.base import BaseKPIFormula

_ZERO = 0.0  # value stored when the denominator is not positive


class CategorySalesFormula(BaseKPIFormula):
    """
    Average sale per product for one classification bucket.
    """

    required_inputs = ("product_count", "total_sales")

    def calculate(self, inputs: dict[str, Any]) -> dict[str, float]:
        self.require(inputs)
        product_count: int = inputs["product_count"]
        total_sales: float = inputs["total_sales"]

        return {
            "total_sales": total_sales,
            "average_sales": _average_sales(total_sales, product_count),
        }


class RotationIndexFormula(BaseKPIFormula):
    """
    Volume sold relative to stock held for one subcategory.
    """

    required_inputs = ("total_volume", "total_stock")

    def calculate(self, inputs: dict[str, Any]) -> dict[str, float]:
        self.require(inputs)
        total_volume: float = inputs["total_volume"]
        total_stock: float = inputs["total_stock"]

        return {"rotation_index": _rotation_index(total_volume, total_stock)}


# ---------------------------------------------------------------------------
# Pure formula functions
# ---------------------------------------------------------------------------


def _average_sales(total_sales: float, product_count: int) -> float:
    """
    Average Sales = total_sales / product_count.

    Returns 0.0 when product_count is zero.
    """
    if product_count <= 0:
        return _ZERO
    return total_sales / product_count


def _rotation_index(total_volume: float, total_stock: float) -> float:
    """
    Rotation Index = total_volume / total_stock.

    Returns 0.0 when total_stock is zero or negative.
    """
    if total_stock <= 0:
        return _ZERO
    return total_volume / total_stock
