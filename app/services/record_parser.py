"""
app/services/record_parser.py

Parses raw delimited inventory text into an ordered sequence of rows.

The delimiter is not declared by the source file. It is inferred from a
sample of lines: the candidate that splits every sampled line into the same
number of columns wins.
"""

from __future__ import annotations

import csv
import io
import logging
from functools import lru_cache
from typing import Iterable, Sequence

from app.config import get_dashboard_settings
from app.domain.inventory import InventoryRow, ParseReport, ParseWarning
from app.validators.scalar_parser import ScalarParser

logger = logging.getLogger(__name__)

DELIMITER_CANDIDATES: tuple[str, ...] = (";", ",", "\t", "|")
DEFAULT_DELIMITER = ","

# A delimiter must split the sample into more than one column on average.
_MIN_AVERAGE_FIELDS = 1.99

_BOM = "\ufeff"


class RecordParseError(ValueError):
    """
    Raised when the text cannot be read as delimited records at all.
    """


class RecordParser:
    """
    Converts delimited text into :class:`InventoryRow` values.

    Header names come from the first non-empty line. Cell values are
    type-inferred; blank lines are skipped and never become rows.
    """

    def __init__(
        self,
        *,
        delimiter_candidates: Sequence[str] = DELIMITER_CANDIDATES,
        sample_lines: int = 10,
        max_warnings: int = 500,
        log_warnings: bool = True,
        scalar_parser: ScalarParser | None = None,
    ) -> None:
        self._candidates = tuple(delimiter_candidates)
        self._sample_lines = max(1, sample_lines)
        self._max_warnings = max(1, max_warnings)
        self._log_warnings = log_warnings
        self._scalar_parser = scalar_parser or ScalarParser()

    def parse(self, text: str) -> ParseReport:
        """
        Parse *text* into rows in input order.

        Raises
        ------
        RecordParseError
            When the csv reader rejects the content.
        """

        if text.startswith(_BOM):
            text = text[len(_BOM):]

        content_lines = [line for line in text.splitlines() if line.strip()]
        if not content_lines:
            return ParseReport(rows=(), delimiter=DEFAULT_DELIMITER, fields=())

        delimiter = self.guess_delimiter(content_lines[: self._sample_lines])

        rows: list[InventoryRow] = []
        warnings: list[ParseWarning] = []
        skipped = 0
        try:
            reader = csv.reader(io.StringIO(text, newline=""), delimiter=delimiter)
            header: tuple[str, ...] | None = None
            for record in reader:
                line_number = reader.line_num
                if _is_empty_line(record):
                    skipped += 1
                    continue
                if header is None:
                    header = _dedupe_header(cell.strip() for cell in record)
                    continue

                values = self._build_values(
                    header=header,
                    record=record,
                    line_number=line_number,
                    warnings=warnings,
                )
                rows.append(InventoryRow(values, line_number=line_number))
        except csv.Error as exc:
            raise RecordParseError(f"Invalid delimited format: {exc}") from exc

        logger.debug(
            "parsed rows=%d delimiter=%r skipped_empty_lines=%d warnings=%d",
            len(rows),
            delimiter,
            skipped,
            len(warnings),
        )
        return ParseReport(
            rows=tuple(rows),
            delimiter=delimiter,
            fields=header or (),
            skipped_empty_lines=skipped,
            warnings=tuple(warnings),
        )

    def guess_delimiter(self, sample: Sequence[str]) -> str:
        """
        Pick the candidate with the most consistent column count over *sample*.

        Ties resolve to the earlier candidate; when no candidate yields more
        than one column on average the comma default is returned.
        """

        best_delimiter: str | None = None
        best_delta: float | None = None

        for candidate in self._candidates:
            counts = _field_counts(sample, candidate)
            if not counts:
                continue
            average = sum(counts) / len(counts)
            if average <= _MIN_AVERAGE_FIELDS:
                continue
            delta = sum(abs(count - average) for count in counts)
            if best_delta is None or delta < best_delta:
                best_delimiter = candidate
                best_delta = delta

        return best_delimiter or DEFAULT_DELIMITER

    def _build_values(
        self,
        *,
        header: tuple[str, ...],
        record: list[str],
        line_number: int,
        warnings: list[ParseWarning],
    ) -> dict[str, object]:
        if len(record) < len(header):
            self._record_warning(
                warnings,
                ParseWarning(
                    line_number=line_number,
                    message=f"Too few fields: expected {len(header)}, found {len(record)}.",
                ),
            )
        elif len(record) > len(header):
            self._record_warning(
                warnings,
                ParseWarning(
                    line_number=line_number,
                    message=f"Too many fields: expected {len(header)}, found {len(record)}.",
                    value=str(record[len(header):]),
                ),
            )

        return {
            name: self._scalar_parser.infer(cell)
            for name, cell in zip(header, record)
        }

    def _record_warning(self, warnings: list[ParseWarning], warning: ParseWarning) -> None:
        if self._log_warnings:
            logger.warning(
                "Parse warning line=%s message=%s value=%r",
                warning.line_number,
                warning.message,
                warning.value,
            )

        if len(warnings) < self._max_warnings:
            warnings.append(warning)


def _is_empty_line(record: list[str]) -> bool:
    return not record or (len(record) == 1 and not record[0].strip())


def _field_counts(sample: Sequence[str], delimiter: str) -> list[int]:
    try:
        return [len(record) for record in csv.reader(sample, delimiter=delimiter) if record]
    except csv.Error:
        return []


def _dedupe_header(names: Iterable[str]) -> tuple[str, ...]:
    seen: dict[str, int] = {}
    header: list[str] = []
    for name in names:
        if name in seen:
            seen[name] += 1
            header.append(f"{name}_{seen[name]}")
        else:
            seen[name] = 0
            header.append(name)
    return tuple(header)


@lru_cache(maxsize=1)
def get_record_parser() -> RecordParser:
    """
    Build and cache the parser with env-driven settings.
    """

    settings = get_dashboard_settings()
    return RecordParser(
        sample_lines=settings.delimiter_sample_lines,
        max_warnings=settings.max_parse_warnings,
        log_warnings=settings.log_parse_warnings,
    )
