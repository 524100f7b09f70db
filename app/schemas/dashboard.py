"""
app/schemas/dashboard.py

Output contract between the aggregation pipeline and the presentation layer.

Field names serialize in camelCase (``productCount``, ``averageSales``...);
snake_case names are accepted when building models directly.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.domain.inventory import (
    CategoryDistributionEntry,
    CategorySalesEntry,
    DashboardLoadResult,
    ParseWarning,
    RotationEntry,
    TopProductEntry,
)

CellValue = str | int | float | bool | None


class _DashboardModel(BaseModel):
    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class CategoryDistributionResponse(_DashboardModel):
    category: str
    product_count: int = Field(..., ge=0)

    @classmethod
    def from_entry(cls, entry: CategoryDistributionEntry) -> CategoryDistributionResponse:
        return cls(category=entry.category, product_count=entry.product_count)


class CategorySalesResponse(_DashboardModel):
    category: str
    product_count: int = Field(..., ge=0)
    total_sales: float
    average_sales: float

    @classmethod
    def from_entry(cls, entry: CategorySalesEntry) -> CategorySalesResponse:
        return cls(
            category=entry.category,
            product_count=entry.product_count,
            total_sales=entry.total_sales,
            average_sales=entry.average_sales,
        )


class RotationResponse(_DashboardModel):
    subcategory: str
    rotation_index: float = Field(..., gt=0)
    product_count: int = Field(..., ge=0)

    @classmethod
    def from_entry(cls, entry: RotationEntry) -> RotationResponse:
        return cls(
            subcategory=entry.subcategory,
            rotation_index=entry.rotation_index,
            product_count=entry.product_count,
        )


class TopProductResponse(_DashboardModel):
    code: CellValue = None
    name: CellValue = None
    category: str | None = None
    subcategory: str | None = None
    amount: float
    volume: float

    @classmethod
    def from_entry(cls, entry: TopProductEntry) -> TopProductResponse:
        return cls(
            code=entry.code,
            name=entry.name,
            category=entry.category,
            subcategory=entry.subcategory,
            amount=entry.amount,
            volume=entry.volume,
        )


class ParseWarningResponse(_DashboardModel):
    line_number: int = Field(..., ge=1)
    message: str
    value: str | None = None

    @classmethod
    def from_warning(cls, warning: ParseWarning) -> ParseWarningResponse:
        return cls(line_number=warning.line_number, message=warning.message, value=warning.value)


class LoadErrorResponse(_DashboardModel):
    code: str
    message: str


class DashboardResponse(_DashboardModel):
    """
    Everything the presentation layer needs from one load.

    ``ok`` is False with every list empty when the dataset could not be
    loaded or parsed.
    """

    ok: bool
    source: str
    error: LoadErrorResponse | None = None
    row_count: int = Field(0, ge=0)
    distribution: list[CategoryDistributionResponse] = Field(default_factory=list)
    category_sales: list[CategorySalesResponse] = Field(default_factory=list)
    rotation: list[RotationResponse] = Field(default_factory=list)
    top_products: list[TopProductResponse] = Field(default_factory=list)
    top_products_breakdown: list[CategoryDistributionResponse] = Field(default_factory=list)
    parse_warnings: list[ParseWarningResponse] = Field(default_factory=list)

    @classmethod
    def from_result(cls, result: DashboardLoadResult) -> DashboardResponse:
        snapshot = result.snapshot
        return cls(
            ok=result.ok,
            source=result.source,
            error=(
                LoadErrorResponse(code=result.error.code, message=result.error.message)
                if result.error is not None
                else None
            ),
            row_count=snapshot.row_count,
            distribution=[CategoryDistributionResponse.from_entry(e) for e in snapshot.distribution],
            category_sales=[CategorySalesResponse.from_entry(e) for e in snapshot.category_sales],
            rotation=[RotationResponse.from_entry(e) for e in snapshot.rotation],
            top_products=[TopProductResponse.from_entry(e) for e in snapshot.top_products],
            top_products_breakdown=[
                CategoryDistributionResponse.from_entry(e) for e in snapshot.top_products_breakdown
            ],
            parse_warnings=[ParseWarningResponse.from_warning(w) for w in result.parse_warnings],
        )
