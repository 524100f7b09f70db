"""
app/services package marker.
"""

from app.services.aggregation_service import (
    InventoryAggregationService,
    get_aggregation_service,
)
from app.services.dashboard_service import DashboardService, get_dashboard_service
from app.services.dataset_loader import DatasetLoader, DatasetLoadError
from app.services.record_parser import RecordParseError, RecordParser, get_record_parser

__all__ = [
    "DashboardService",
    "DatasetLoadError",
    "DatasetLoader",
    "InventoryAggregationService",
    "RecordParseError",
    "RecordParser",
    "get_aggregation_service",
    "get_dashboard_service",
    "get_record_parser",
]
