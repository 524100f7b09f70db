"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path

DEFAULT_DATASET_SOURCE = "data/data-3.csv"
DEFAULT_UNCLASSIFIED_LABEL = "unclassified"


def load_env_files() -> None:
    """
    Load simple KEY=VALUE pairs from `.env` and `.env.local` (if present).
    Existing process environment variables are not overwritten.
    """

    project_root = Path(__file__).resolve().parents[1]
    for filename in (".env", ".env.local"):
        env_path = project_root / filename
        if not env_path.exists():
            continue

        for raw_line in env_path.read_text(encoding="utf-8").splitlines():
            line = raw_line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue

            key, value = line.split("=", 1)
            key = key.strip()
            value = value.strip().strip('"').strip("'")
            if key and key not in os.environ:
                os.environ[key] = value


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_bool_env(name: str, default: bool) -> bool:
    """
    Read a boolean from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_float_env(name: str, default: float) -> float:
    """
    Read a float from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return float(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


@dataclass(frozen=True)
class InventoryFieldNames:
    """
    Header names of the inventory columns the dashboard reads.

    Matched exactly against the dataset header row.
    """

    classification: str = "ABC"
    amount: str = "Importe Vendido"
    subcategory: str = "Subcategoría"
    stock: str = "Stock"
    volume: str = "Volumen Vendido"
    code: str = "Material"
    name: str = "Descripción"


@dataclass(frozen=True)
class DashboardSettings:
    """
    Runtime settings for the inventory dashboard pipeline.
    """

    dataset_source: str = DEFAULT_DATASET_SOURCE
    top_products_limit: int = 20
    rotation_min_products: int = 5
    unclassified_label: str = DEFAULT_UNCLASSIFIED_LABEL
    delimiter_sample_lines: int = 10
    http_timeout_seconds: float = 15.0
    log_parse_warnings: bool = True
    max_parse_warnings: int = 500
    fields: InventoryFieldNames = field(default_factory=InventoryFieldNames)


@lru_cache(maxsize=1)
def get_field_names() -> InventoryFieldNames:
    """
    Return cached inventory header names, overridable per deployment.
    """

    defaults = InventoryFieldNames()
    return InventoryFieldNames(
        classification=_get_str_env("INVENTORY_FIELD_CLASSIFICATION", defaults.classification),
        amount=_get_str_env("INVENTORY_FIELD_AMOUNT", defaults.amount),
        subcategory=_get_str_env("INVENTORY_FIELD_SUBCATEGORY", defaults.subcategory),
        stock=_get_str_env("INVENTORY_FIELD_STOCK", defaults.stock),
        volume=_get_str_env("INVENTORY_FIELD_VOLUME", defaults.volume),
        code=_get_str_env("INVENTORY_FIELD_CODE", defaults.code),
        name=_get_str_env("INVENTORY_FIELD_NAME", defaults.name),
    )


@lru_cache(maxsize=1)
def get_dashboard_settings() -> DashboardSettings:
    """
    Return cached dashboard settings from environment variables.
    """

    return DashboardSettings(
        dataset_source=_get_str_env("INVENTORY_DATASET_SOURCE", DEFAULT_DATASET_SOURCE),
        top_products_limit=max(1, _get_int_env("INVENTORY_TOP_PRODUCTS_LIMIT", 20)),
        rotation_min_products=max(0, _get_int_env("INVENTORY_ROTATION_MIN_PRODUCTS", 5)),
        unclassified_label=_get_str_env("INVENTORY_UNCLASSIFIED_LABEL", DEFAULT_UNCLASSIFIED_LABEL),
        delimiter_sample_lines=max(1, _get_int_env("INVENTORY_DELIMITER_SAMPLE_LINES", 10)),
        http_timeout_seconds=max(1.0, _get_float_env("INVENTORY_HTTP_TIMEOUT_SECONDS", 15.0)),
        log_parse_warnings=_get_bool_env("INVENTORY_LOG_PARSE_WARNINGS", True),
        max_parse_warnings=max(1, _get_int_env("INVENTORY_MAX_PARSE_WARNINGS", 500)),
        fields=get_field_names(),
    )
