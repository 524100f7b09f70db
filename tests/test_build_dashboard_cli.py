from __future__ import annotations

import json
from collections.abc import Iterator
from pathlib import Path

import pytest

from app.config import get_dashboard_settings, get_field_names
from app.services.aggregation_service import get_aggregation_service
from app.services.dashboard_service import get_dashboard_service
from app.services.record_parser import get_record_parser
from scripts.build_dashboard import build_service, main

_HEADER = "Material;Descripción;ABC;Subcategoría;Stock;Volumen Vendido;Importe Vendido\n"


@pytest.fixture(autouse=True)
def _fresh_factories() -> Iterator[None]:
    factories = (
        get_dashboard_settings,
        get_field_names,
        get_record_parser,
        get_aggregation_service,
        get_dashboard_service,
    )
    for factory in factories:
        factory.cache_clear()
    yield
    for factory in factories:
        factory.cache_clear()


@pytest.fixture()
def dataset(tmp_path: Path) -> Path:
    lines = [_HEADER]
    for index in range(30):
        category = "ABC"[index % 3]
        lines.append(f"{1000 + index};Producto {index};{category};Bebidas;2;6;$ {index + 1},00\n")
    path = tmp_path / "data-3.csv"
    path.write_text("".join(lines), encoding="utf-8")
    return path


def test_prints_dashboard_json(dataset: Path, capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = main(["--source", str(dataset)])

    payload = json.loads(capsys.readouterr().out)
    assert exit_code == 0
    assert payload["ok"] is True
    assert payload["rowCount"] == 30
    assert len(payload["topProducts"]) == 20
    assert payload["topProducts"][0]["code"] == 1029
    assert payload["rotation"] == [
        {"subcategory": "Bebidas", "rotationIndex": 3.0, "productCount": 30}
    ]
    assert {entry["category"] for entry in payload["distribution"]} == {"A", "B", "C"}


def test_top_limit_option(dataset: Path, capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = main(["--source", str(dataset), "--top-limit", "3", "--indent", "0"])

    payload = json.loads(capsys.readouterr().out)
    assert exit_code == 0
    assert [entry["code"] for entry in payload["topProducts"]] == [1029, 1028, 1027]


def test_missing_source_exits_non_zero(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = main(["--source", str(tmp_path / "absent.csv")])

    payload = json.loads(capsys.readouterr().out)
    assert exit_code == 1
    assert payload["ok"] is False
    assert payload["error"]["code"] == "load_failure"
    assert payload["topProducts"] == []


def test_default_source_comes_from_environment(
    dataset: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    monkeypatch.setenv("INVENTORY_DATASET_SOURCE", str(dataset))

    exit_code = main([])

    payload = json.loads(capsys.readouterr().out)
    assert exit_code == 0
    assert payload["source"] == str(dataset)
    assert payload["rowCount"] == 30


def test_build_service_uses_shared_service_without_top_limit() -> None:
    assert build_service() is get_dashboard_service()
    assert build_service(top_limit=3) is not get_dashboard_service()
