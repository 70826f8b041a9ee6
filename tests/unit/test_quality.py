from __future__ import annotations

import pytest

from funnel_engine.config.loader import EngineConfig
from funnel_engine.services.quality import analyze_data_quality, check_funnel_consistency, check_kpi_consistency


def _codes(report) -> list[str]:
    return [w.code for w in report.warnings]


def test_no_data():
    report = analyze_data_quality([], "dia", ["leads_total"])
    assert report.total_rows == 0
    assert _codes(report) == ["NO_DATA"]
    assert report.warnings[0].severity == "warning"


def test_low_time_parse_rate_enables_degraded_mode():
    rows = [{"dia": "2024-03-01"}, {"dia": "??"}, {"dia": None}, {"dia": "x"}]
    report = analyze_data_quality(rows, "dia", [])
    assert report.time_parse_rate == pytest.approx(0.25)
    assert report.degraded_mode is True
    low = report.warnings[0]
    assert (low.code, low.column) == ("LOW_TIME_PARSE_RATE", "dia")
    assert "25%" in low.message


def test_truthy_rates_and_null_rates():
    rows = [
        {"dia": "2024-03-01", "agendou": "sim", "compareceu": "não", "obs": None},
        {"dia": "2024-03-02", "agendou": "sim", "compareceu": None, "obs": None},
        {"dia": "2024-03-03", "agendou": "x", "compareceu": "0", "obs": "ok"},
    ]
    report = analyze_data_quality(rows, "dia", ["agendou", "compareceu"])
    assert report.time_parse_rate == 1.0 and report.degraded_mode is False
    assert report.truthy_rates == {"agendou": 1.0, "compareceu": 0.0}
    assert report.null_rates["compareceu"] == pytest.approx(1 / 3)
    assert report.null_rates["obs"] == pytest.approx(2 / 3)
    assert _codes(report) == ["ALL_TRUTHY", "ZERO_TRUTHY", "HIGH_NULL_RATE"]
    assert report.warnings[-1].column == "obs"


def test_high_null_threshold_from_config():
    rows = [{"obs": None}, {"obs": "a"}, {"obs": "b"}]
    assert _codes(analyze_data_quality(rows, None, [])) == []
    assert _codes(analyze_data_quality(rows, None, [], EngineConfig(high_null_rate=0.3))) == ["HIGH_NULL_RATE"]


def test_funnel_consistency():
    ok = check_funnel_consistency([("Leads", 100), ("Entradas", 105), ("Vendas", 10)])
    assert ok.valid is True and ok.issues == []
    bad = check_funnel_consistency([("Leads", 10), ("Entradas", 20)])
    assert bad.valid is False
    assert bad.issues == ['"Entradas" (20) > "Leads" (10)']
    assert check_funnel_consistency([]).valid is True


def test_kpi_consistency():
    bad = check_kpi_consistency({"venda": 12, "leads_total": 10})
    assert bad.valid is False and bad.issues == ["Vendas (12) > Leads (10)"]
    rates = check_kpi_consistency({"taxa_entrada": 140, "conv_rate": 50})
    assert rates.valid is True
    assert rates.issues == ['Taxa "taxa_entrada" fora do range: 140']
