from __future__ import annotations

import json

from funnel_engine.models.column import ColumnType, PercentScale
from funnel_engine.services.spec_parser import parse_dashboard_spec, validate_spec_json

FULL_SPEC = {
    "version": 1,
    "title": "Funil Diário",
    "time": {"column": "dia", "type": "date"},
    "columns": [
        {"name": "dia", "type": "date", "label": "Data"},
        {"name": "taxa_entrada", "type": "percent", "scale": "0to100"},
        {"name": "canal", "type": "categoria"},
        {"type": "number"},
    ],
    "kpis": [
        {"label": "CPL", "column": "cpl", "agg": "avg", "format": "currency", "goal": 20, "goalDirection": "lower_better"},
        {"label": "", "column": "leads_total"},
        "not-a-kpi",
    ],
    "funnel": {"steps": [{"label": "Leads", "column": "leads_total"}, {"label": "Vendas"}]},
    "charts": [
        {"title": "Custo", "series": [{"label": "Custo", "y": "custo_total", "format": "currency"}]},
        {"title": "Sem séries", "series": []},
    ],
    "goals": [{"metric": "cac", "op": "<=", "value": 200}, {"metric": "cpl", "value": "x"}],
    "ui": {"tabs": ["Executivo", "Funil"], "defaultTab": "Funil", "comparePeriods": False, "refreshInterval": 60},
}


def test_parse_full_spec():
    spec = parse_dashboard_spec(FULL_SPEC)
    assert spec is not None
    assert spec.version == 1 and spec.title == "Funil Diário"
    assert spec.time.column == "dia"

    assert [c.name for c in spec.columns] == ["dia", "taxa_entrada", "canal"]
    assert spec.columns[1].scale == PercentScale.HUNDRED
    assert spec.columns[2].type == ColumnType.STRING  # unknown type string coerced

    assert [k.column for k in spec.kpis] == ["cpl"]
    assert spec.kpis[0].goal == 20 and spec.kpis[0].goal_direction == "lower_better"

    assert [s.column for s in spec.funnel.steps] == ["leads_total"]

    assert len(spec.charts) == 1
    chart = spec.charts[0]
    assert (chart.type, chart.x) == ("line", "dia")
    assert chart.series[0].format == "currency"

    assert [(g.metric, g.value) for g in spec.goals] == [("cac", 200), ("cpl", 0)]
    assert spec.ui.tabs == ["Executivo", "Funil"]
    assert spec.ui.compare_periods is False
    assert spec.ui.refresh_interval == 60


def test_minimal_spec_has_no_optional_sections():
    spec = parse_dashboard_spec({"version": 2})
    assert spec.version == 2
    assert spec.columns is None and spec.kpis is None and spec.funnel is None and spec.ui is None


def test_field_defaults():
    spec = parse_dashboard_spec({
        "version": 1,
        "time": {},
        "kpis": [{"label": "Leads", "column": "leads_total"}],
        "charts": [{"title": "T", "x": "", "series": [{"label": "L", "y": "leads_total"}]}],
        "goals": [{"metric": "cpl"}],
    })
    assert (spec.time.column, spec.time.type) == ("dia", "date")
    assert (spec.kpis[0].agg, spec.kpis[0].format) == ("sum", "number")
    assert spec.charts[0].x == "dia"
    assert spec.goals[0].op == "<="


def test_rejects_non_objects_and_missing_version():
    assert parse_dashboard_spec(None) is None
    assert parse_dashboard_spec([{"version": 1}]) is None
    assert parse_dashboard_spec({"title": "x"}) is None
    assert parse_dashboard_spec({"version": "1"}) is None
    assert parse_dashboard_spec({"version": True}) is None


def test_validate_spec_json_syntax_error():
    result = validate_spec_json("{not valid json")
    assert result.valid is False
    assert result.error
    assert result.spec is None


def test_validate_spec_json_structure_error():
    result = validate_spec_json(json.dumps({"kpis": []}))
    assert result.valid is False
    assert result.error == "Invalid spec structure"


def test_validate_spec_json_ok():
    result = validate_spec_json(json.dumps(FULL_SPEC))
    assert result.valid is True and result.error is None
    assert result.spec.title == "Funil Diário"


def test_to_dict_round_trip_shape():
    doc = parse_dashboard_spec(FULL_SPEC).to_dict()
    assert doc["kpis"][0] == {
        "label": "CPL", "column": "cpl", "agg": "avg", "format": "currency", "goal": 20, "goalDirection": "lower_better",
    }
    assert doc["ui"] == {"tabs": ["Executivo", "Funil"], "defaultTab": "Funil", "comparePeriods": False, "refreshInterval": 60}
    assert parse_dashboard_spec(doc).to_dict() == doc
