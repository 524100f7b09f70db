"""
Build the inventory dashboard views from CLI and print them as JSON.
"""

from __future__ import annotations

import argparse
import dataclasses
import json
from typing import Sequence

from app.config import get_dashboard_settings
from app.logging_utils import configure_logging
from app.schemas.dashboard import DashboardResponse
from app.services.aggregation_service import InventoryAggregationService
from app.services.dashboard_service import DashboardService, get_dashboard_service
from app.services.dataset_loader import DatasetLoader
from app.services.record_parser import get_record_parser


def build_service(top_limit: int | None = None) -> DashboardService:
    if top_limit is None:
        return get_dashboard_service()

    settings = dataclasses.replace(get_dashboard_settings(), top_products_limit=max(1, top_limit))

    return DashboardService(
        default_source=settings.dataset_source,
        loader=DatasetLoader(timeout_seconds=settings.http_timeout_seconds),
        parser=get_record_parser(),
        aggregator=InventoryAggregationService(
            fields=settings.fields,
            unclassified_label=settings.unclassified_label,
            top_products_limit=settings.top_products_limit,
            rotation_min_products=settings.rotation_min_products,
        ),
    )


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Compute inventory dashboard views.")
    parser.add_argument(
        "--source",
        dest="source",
        default=None,
        help="Dataset path or http(s) URL. Defaults to INVENTORY_DATASET_SOURCE.",
    )
    parser.add_argument(
        "--top-limit",
        dest="top_limit",
        type=int,
        default=None,
        help="Number of products in the top-value ranking.",
    )
    parser.add_argument(
        "--indent",
        dest="indent",
        type=int,
        default=2,
        help="JSON indentation.",
    )
    args = parser.parse_args(argv)

    configure_logging()
    with build_service(top_limit=args.top_limit) as service:
        result = service.load_sync(args.source)

    payload = DashboardResponse.from_result(result).model_dump(mode="json", by_alias=True)
    print(json.dumps(payload, indent=args.indent, ensure_ascii=False))
    return 0 if result.ok else 1


if __name__ == "__main__":
    raise SystemExit(main())
