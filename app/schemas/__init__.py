"""
app/schemas package marker.
"""

from app.schemas.dashboard import (
    CategoryDistributionResponse,
    CategorySalesResponse,
    DashboardResponse,
    LoadErrorResponse,
    ParseWarningResponse,
    RotationResponse,
    TopProductResponse,
)

__all__ = [
    "CategoryDistributionResponse",
    "CategorySalesResponse",
    "DashboardResponse",
    "LoadErrorResponse",
    "ParseWarningResponse",
    "RotationResponse",
    "TopProductResponse",
]
