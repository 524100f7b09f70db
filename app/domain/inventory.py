"""
app/domain/inventory.py

Domain models for the inventory dashboard: parsed rows and the derived
result sets handed to the presentation layer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping

from app.domain.fields import FieldStatus, NumericField, TextField, normalize


class InventoryRow:
    """
    One parsed inventory line with typed column accessors.

    The underlying mapping is read-only. Accessors never raise: an absent
    column reads as missing, a non-numeric value as invalid.
    """

    __slots__ = ("_values", "line_number")

    def __init__(self, values: Mapping[str, Any], line_number: int = 0) -> None:
        self._values = MappingProxyType(dict(values))
        self.line_number = line_number

    @property
    def values(self) -> Mapping[str, Any]:
        return self._values

    def raw(self, name: str) -> Any:
        return self._values.get(name)

    def text(self, name: str) -> TextField:
        value = self._values.get(name)
        if value is None or isinstance(value, bool):
            return TextField(status=FieldStatus.MISSING)
        text = str(value).strip()
        if not text:
            return TextField(status=FieldStatus.MISSING)
        return TextField(status=FieldStatus.PRESENT, value=text)

    def number(self, name: str) -> NumericField:
        return normalize(self._values.get(name))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, InventoryRow):
            return NotImplemented
        return dict(self._values) == dict(other._values) and self.line_number == other.line_number

    def __hash__(self) -> int:
        return hash((self.line_number, tuple(self._values.items())))

    def __repr__(self) -> str:
        return f"InventoryRow(line_number={self.line_number}, values={dict(self._values)!r})"


# ---------------------------------------------------------------------------
# Derived result sets
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CategoryDistributionEntry:
    """
    Product count for one ABC classification bucket.
    """

    category: str
    product_count: int


@dataclass(frozen=True)
class CategorySalesEntry:
    """
    Sales totals for one ABC classification bucket.
    """

    category: str
    product_count: int
    total_sales: float
    average_sales: float


@dataclass(frozen=True)
class RotationEntry:
    """
    Inventory rotation (volume sold over stock held) for one subcategory.
    """

    subcategory: str
    rotation_index: float
    product_count: int


@dataclass(frozen=True)
class TopProductEntry:
    """
    One product ranked by sold amount.

    ``category`` is the raw classification code and may be ``None``.
    """

    code: Any
    name: Any
    category: str | None
    subcategory: str | None
    amount: float
    volume: float


@dataclass(frozen=True)
class DashboardSnapshot:
    """
    Every result set computed from one dataset load.
    """

    distribution: tuple[CategoryDistributionEntry, ...] = ()
    category_sales: tuple[CategorySalesEntry, ...] = ()
    rotation: tuple[RotationEntry, ...] = ()
    top_products: tuple[TopProductEntry, ...] = ()
    top_products_breakdown: tuple[CategoryDistributionEntry, ...] = ()
    row_count: int = 0

    @classmethod
    def empty(cls) -> DashboardSnapshot:
        return cls()

    @property
    def is_empty(self) -> bool:
        return self.row_count == 0


# ---------------------------------------------------------------------------
# Parse and load outcomes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ParseWarning:
    """
    One non-fatal anomaly met while parsing a line.
    """

    line_number: int
    message: str
    value: str | None = None


@dataclass(frozen=True)
class ParseReport:
    """
    Parsed rows plus what the parser inferred along the way.
    """

    rows: tuple[InventoryRow, ...]
    delimiter: str
    fields: tuple[str, ...]
    skipped_empty_lines: int = 0
    warnings: tuple[ParseWarning, ...] = ()


@dataclass(frozen=True)
class LoadFailure:
    """
    Why a dataset load produced no data.
    """

    code: str
    message: str


@dataclass(frozen=True)
class DashboardLoadResult:
    """
    End-of-run outcome of the load -> parse -> aggregate pipeline.

    On failure ``ok`` is False and ``snapshot`` is empty, never partial.
    """

    ok: bool
    snapshot: DashboardSnapshot
    source: str
    error: LoadFailure | None = None
    parse_warnings: tuple[ParseWarning, ...] = field(default_factory=tuple)

    @classmethod
    def failed(cls, *, source: str, code: str, message: str) -> DashboardLoadResult:
        return cls(
            ok=False,
            snapshot=DashboardSnapshot.empty(),
            source=source,
            error=LoadFailure(code=code, message=message),
        )
