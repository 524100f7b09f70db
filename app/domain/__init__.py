"""
app/domain package marker.
"""

from app.domain.fields import FieldStatus, NumericField, TextField, normalize
from app.domain.inventory import (
    CategoryDistributionEntry,
    CategorySalesEntry,
    DashboardLoadResult,
    DashboardSnapshot,
    InventoryRow,
    LoadFailure,
    ParseReport,
    ParseWarning,
    RotationEntry,
    TopProductEntry,
)

__all__ = [
    "CategoryDistributionEntry",
    "CategorySalesEntry",
    "DashboardLoadResult",
    "DashboardSnapshot",
    "FieldStatus",
    "InventoryRow",
    "LoadFailure",
    "NumericField",
    "ParseReport",
    "ParseWarning",
    "RotationEntry",
    "TextField",
    "TopProductEntry",
    "normalize",
]
