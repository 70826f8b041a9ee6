from __future__ import annotations

from funnel_engine.models.column import ColumnType, PercentScale
from funnel_engine.services.inference import generate_spec_from_data


def test_full_funnel_columns(funnel_columns):
    spec = generate_spec_from_data(funnel_columns)
    assert spec.version == 1
    assert spec.time.column == "dia"
    assert [s.column for s in spec.funnel.steps] == [
        "leads_total", "entrada_total", "reuniao_agendada_total", "reuniao_realizada_total", "venda_total",
    ]
    assert [c.title for c in spec.charts] == ["Tendência • Custo x Leads", "Eficiência • CPL x CAC"]
    assert spec.ui.tabs == ["Executivo", "Funil", "Eficiência", "Tendências", "Detalhes"]
    assert spec.ui.default_tab == "Executivo"
    assert spec.ui.compare_periods is True


def test_kpis_formats_and_directions(funnel_columns):
    kpis = {k.column: k for k in generate_spec_from_data(funnel_columns).kpis}
    assert list(kpis) == ["custo_total", "leads_total", "entrada_total", "venda_total", "cpl", "cac"]
    assert (kpis["cpl"].agg, kpis["cpl"].format, kpis["cpl"].goal_direction) == ("avg", "currency", "lower_better")
    assert (kpis["custo_total"].agg, kpis["custo_total"].goal_direction) == ("sum", "lower_better")
    assert (kpis["leads_total"].format, kpis["leads_total"].goal_direction) == ("integer", "higher_better")


def test_no_date_column_means_no_time_and_no_charts():
    spec = generate_spec_from_data(["custo_total", "leads_total", "cpl", "cac"])
    assert spec.time is None
    assert spec.charts is None
    assert spec.funnel is None
    assert spec.ui.tabs == ["Executivo", "Detalhes"]


def test_funnel_needs_three_stages():
    spec = generate_spec_from_data(["dia", "leads_total", "venda_total"])
    assert spec.funnel is None
    assert spec.ui.tabs == ["Executivo", "Detalhes"]


def test_efficiency_chart_without_funnel():
    spec = generate_spec_from_data(["dia", "cpl", "cac"])
    assert spec.funnel is None
    assert [c.title for c in spec.charts] == ["Eficiência • CPL x CAC"]
    assert spec.ui.tabs == ["Executivo", "Eficiência", "Tendências", "Detalhes"]


def test_unknown_columns_use_sample_row():
    spec = generate_spec_from_data(
        ["quando", "canal", "score", "conversion_rate"],
        sample_row={"quando": "2024-03-01", "canal": "google", "score": "3,5", "conversion_rate": "35"},
    )
    types = {c.name: c.type for c in spec.columns}
    assert types == {
        "quando": ColumnType.DATE,
        "canal": ColumnType.STRING,
        "score": ColumnType.NUMBER,
        "conversion_rate": ColumnType.PERCENT,
    }
    assert spec.columns[3].scale == PercentScale.HUNDRED
    assert spec.time.column == "quando"


def test_columns_without_samples_default_to_string():
    spec = generate_spec_from_data(["canal"])
    assert spec.columns[0].type == ColumnType.STRING
    assert spec.kpis == []
