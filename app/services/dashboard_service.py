"""
app/services/dashboard_service.py

Service layer for the dashboard load workflow.

One load runs the whole pipeline start to finish:

    1. DatasetLoader.read_text()                 fetch raw text (off the event loop)
    2. RecordParser.parse()                      infer delimiter and build rows
    3. InventoryAggregationService.aggregate()   compute every view

A failure in step 1 or 2 ends the run with ``ok=False`` and empty result
sets; aggregation is not attempted. There is no partial result, no retry
and no cached state: calling :meth:`DashboardService.load` again re-runs
everything and yields the same snapshot for the same text.
"""

from __future__ import annotations

import asyncio
import logging
from functools import lru_cache
from pathlib import Path

from app.config import get_dashboard_settings
from app.domain.inventory import DashboardLoadResult, DashboardSnapshot, ParseReport
from app.failure_codes import LOAD_FAILURE, PARSE_FAILURE
from app.logging_utils import log_event
from app.services.aggregation_service import InventoryAggregationService, get_aggregation_service
from app.services.dataset_loader import DatasetLoader, DatasetLoadError
from app.services.record_parser import RecordParseError, RecordParser, get_record_parser

logger = logging.getLogger(__name__)


class DashboardService:
    """
    Coordinates dataset loading, parsing, and aggregation.
    """

    def __init__(
        self,
        *,
        default_source: str,
        loader: DatasetLoader | None = None,
        parser: RecordParser | None = None,
        aggregator: InventoryAggregationService | None = None,
    ) -> None:
        self._default_source = default_source
        self._loader = loader or DatasetLoader()
        self._parser = parser or RecordParser()
        self._aggregator = aggregator or InventoryAggregationService()

    def __enter__(self) -> DashboardService:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        """
        Close the loader. A loader handed to the service belongs to it.
        """

        self._loader.close()

    def build_snapshot(self, text: str) -> tuple[DashboardSnapshot, ParseReport]:
        """
        Parse *text* and aggregate it. Raises RecordParseError on malformed text.
        """

        report = self._parser.parse(text)
        return self._aggregator.aggregate(report.rows), report

    async def load(self, source: str | Path | None = None) -> DashboardLoadResult:
        """
        Load the dataset at *source* (or the configured default) and compute
        every view.

        Never raises for load or parse failures; inspect ``ok`` and ``error``
        on the result instead.
        """

        resolved = str(source) if source is not None else self._default_source
        log_event(logger, logging.INFO, "dashboard_load_started", source=resolved)

        try:
            text = await asyncio.to_thread(self._loader.read_text, resolved)
        except DatasetLoadError as exc:
            return self._failed(source=resolved, code=LOAD_FAILURE, exc=exc)

        try:
            snapshot, report = self.build_snapshot(text)
        except RecordParseError as exc:
            return self._failed(source=resolved, code=PARSE_FAILURE, exc=exc)

        log_event(
            logger,
            logging.INFO,
            "dashboard_load_completed",
            source=resolved,
            delimiter=report.delimiter,
            rows=snapshot.row_count,
            categories=len(snapshot.distribution),
            rotation_entries=len(snapshot.rotation),
            top_products=len(snapshot.top_products),
            parse_warnings=len(report.warnings),
        )
        return DashboardLoadResult(
            ok=True,
            snapshot=snapshot,
            source=resolved,
            parse_warnings=report.warnings,
        )

    def load_sync(self, source: str | Path | None = None) -> DashboardLoadResult:
        """
        Blocking wrapper around :meth:`load` for callers without an event loop.
        """

        return asyncio.run(self.load(source))

    @staticmethod
    def _failed(*, source: str, code: str, exc: Exception) -> DashboardLoadResult:
        log_event(
            logger,
            logging.WARNING,
            "dashboard_load_failed",
            source=source,
            code=code,
            error=str(exc),
        )
        return DashboardLoadResult.failed(source=source, code=code, message=str(exc))


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


@lru_cache(maxsize=1)
def get_dashboard_service() -> DashboardService:
    """
    Build and cache the dashboard service with env-driven settings.
    """

    settings = get_dashboard_settings()
    return DashboardService(
        default_source=settings.dataset_source,
        loader=DatasetLoader(timeout_seconds=settings.http_timeout_seconds),
        parser=get_record_parser(),
        aggregator=get_aggregation_service(),
    )
