# Shared pytest fixtures
from __future__ import annotations

import json
import logging
import tempfile
from pathlib import Path

import pytest

from funnel_engine.logging.init import LOGGER_NAME, reset_logging

FUNNEL_COLUMNS = [
    "dia",
    "custo_total",
    "leads_total",
    "entrada_total",
    "reuniao_agendada_total",
    "reuniao_realizada_total",
    "venda_total",
    "cpl",
    "cac",
]


@pytest.fixture(autouse=True)
def _detach_log_handlers():
    # handlers bound to a capsys stream must not outlive the test
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
    reset_logging()


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        monkeypatch.chdir(p)
        monkeypatch.delenv("FUNNEL_ENGINE_CONFIG", raising=False)
        yield p


@pytest.fixture()
def funnel_columns() -> list[str]:
    return list(FUNNEL_COLUMNS)


@pytest.fixture()
def funnel_rows() -> list[dict]:
    """Three days of a BR-formatted funnel view, deliberately out of order."""
    return [
        {
            "dia": "03/03/2024", "custo_total": "1.100,00", "leads_total": "8", "entrada_total": "5",
            "reuniao_agendada_total": "4", "reuniao_realizada_total": "3", "venda_total": "1",
            "cpl": "137,50", "cac": "1.100,00",
        },
        {
            "dia": "01/03/2024", "custo_total": "1.250,50", "leads_total": "10", "entrada_total": "6",
            "reuniao_agendada_total": "5", "reuniao_realizada_total": "4", "venda_total": "2",
            "cpl": "125,05", "cac": "625,25",
        },
        {
            "dia": "02/03/2024", "custo_total": "900", "leads_total": "0", "entrada_total": "0",
            "reuniao_agendada_total": "0", "reuniao_realizada_total": "0", "venda_total": "0",
            "cpl": None, "cac": None,
        },
    ]


@pytest.fixture()
def funnel_payload(funnel_columns, funnel_rows) -> dict:
    return {"columns": funnel_columns, "rows": funnel_rows, "meta": {"view": "vw_funnel_daily"}}


@pytest.fixture()
def write_payload(temp_workdir: Path, funnel_payload: dict) -> Path:
    path = temp_workdir / "data" / "payload.json"
    path.write_text(json.dumps(funnel_payload, ensure_ascii=False), encoding="utf-8")
    return path


@pytest.fixture()
def sample_config_yaml() -> str:
    return """type_sample_size: 5
percent_scale_threshold: 1.5
high_null_rate: 0.4
log_level: INFO
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "engine.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg
