from __future__ import annotations

import math
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any

from ..models.column import ColumnType, PercentScale
from ..models.spec import (
    ChartDef,
    ChartSeries,
    DashboardSpec,
    FunnelDef,
    FunnelStep,
    KPIDef,
    SpecColumn,
    TimeConfig,
    UISettings,
)

"""Spec repair against actual data.

A parsed spec can still reference columns the current dataset does not have
(renamed views, dropped metrics). validate_spec_against_data checks every
reference against the first row and returns a repaired copy. Past
COMPATIBILITY_THRESHOLD warnings the repaired document is dropped and a
fallback is generated from the data instead.
"""

__all__ = [
    "COMPATIBILITY_THRESHOLD",
    "FALLBACK_TABS",
    "SpecCheckResult",
    "generate_fallback_spec",
    "validate_spec_against_data",
]

COMPATIBILITY_THRESHOLD = 10
FALLBACK_TABS = ("Decisões", "Executivo", "Detalhes")
MIN_FUNNEL_STEPS = 2
MAX_FALLBACK_KPIS = 6
MAX_FALLBACK_STEPS = 6
MAX_TREND_SERIES = 4

# Funnel position by name fragment, earliest stage first
FUNNEL_ORDER = (
    "leads", "lead",
    "entrada", "entradas",
    "qualificado", "qualificados",
    "reuniao_agendada", "reunioes_agendadas", "agendada",
    "reuniao_realizada", "reunioes_realizadas", "realizada",
    "proposta", "propostas",
    "venda", "vendas",
    "cliente", "clientes",
)
_NOT_A_STAGE = len(FUNNEL_ORDER)
_ISO_DATE_PREFIX = re.compile(r"^\d{4}-\d{2}-\d{2}")
_TIME_HINTS = ("dia", "date", "data")


@dataclass(frozen=True)
class SpecCheckResult:
    valid: bool
    fixed_spec: DashboardSpec
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    compatibility_mode: bool = False


def _is_finite_number(value: Any) -> bool:
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        return False


def _funnel_position(column: str) -> int:
    lower = column.lower()
    for i, fragment in enumerate(FUNNEL_ORDER):
        if fragment in lower:
            return i
    return _NOT_A_STAGE


def _first_row(rows: Sequence[Any]) -> Mapping[str, Any]:
    return rows[0] if rows and isinstance(rows[0], Mapping) else {}


# ----------------------------------------------------------------------------
# fallback spec
# ----------------------------------------------------------------------------

@dataclass(frozen=True)
class _ColumnGuess:
    name: str
    type: ColumnType
    semantic: str  # time | currency | percent | count | metric | text
    label: str


def _type_from_value(value: Any) -> ColumnType:
    if isinstance(value, bool):
        return ColumnType.BOOLEAN
    if isinstance(value, (int, float)):
        return ColumnType.NUMBER
    if isinstance(value, datetime) or (isinstance(value, str) and _ISO_DATE_PREFIX.match(value)):
        return ColumnType.DATE
    return ColumnType.STRING


def _guess_column(name: str, value: Any) -> _ColumnGuess:
    lower = name.lower()
    col_type = _type_from_value(value)
    semantic = "text"
    if any(h in lower for h in _TIME_HINTS):
        semantic, col_type = "time", ColumnType.DATE
    elif any(h in lower for h in ("custo", "valor", "cpl", "cac")):
        semantic, col_type = "currency", ColumnType.CURRENCY
    elif lower.startswith("taxa_") or "percent" in lower or "rate" in lower:
        semantic, col_type = "percent", ColumnType.PERCENT
    elif "_total" in lower or "count" in lower or "qtd" in lower:
        semantic, col_type = "count", ColumnType.NUMBER
    elif _is_finite_number(value):
        semantic, col_type = "metric", ColumnType.NUMBER

    label = re.sub(r"_total$", "", name).replace("_", " ")
    label = re.sub(r"\b\w", lambda m: m.group(0).upper(), label)
    return _ColumnGuess(name, col_type, semantic, label)


def generate_fallback_spec(rows: Sequence[Any], dataset_name: str | None = None) -> DashboardSpec:
    """Spec built from the first row's keys and values, with the decision-center tab set."""
    title = dataset_name or "Dashboard"
    ui = UISettings(tabs=list(FALLBACK_TABS), default_tab=FALLBACK_TABS[0], compare_periods=True)
    first = _first_row(rows)
    if not first:
        return DashboardSpec(version=1, title=title, ui=ui)

    guesses = [_guess_column(str(name), value) for name, value in first.items()]
    time_col = next((g for g in guesses if g.semantic == "time"), None)
    numeric = [g for g in guesses if g.semantic in ("currency", "count", "metric", "percent")]

    kpis = [
        KPIDef(
            label=g.label or g.name,
            column=g.name,
            agg="avg" if g.semantic == "percent" else "sum",
            format={"currency": "currency", "percent": "percent"}.get(g.semantic, "integer"),
            goal_direction="lower_better" if g.semantic == "currency" else "higher_better",
        )
        for g in numeric[:MAX_FALLBACK_KPIS]
    ]

    tabs = list(FALLBACK_TABS)
    funnel = None
    stages = sorted((g for g in numeric if _funnel_position(g.name) < _NOT_A_STAGE), key=lambda g: _funnel_position(g.name))
    if len(stages) >= 3:
        funnel = FunnelDef(steps=[FunnelStep(g.label or g.name, g.name) for g in stages[:MAX_FALLBACK_STEPS]])
        tabs = ["Decisões", "Executivo", "Funil", "Detalhes"]

    charts: list[ChartDef] | None = None
    if time_col is not None:
        trend = [g for g in numeric if g.semantic != "percent"][:MAX_TREND_SERIES]
        charts = []
        if trend:
            charts.append(ChartDef(
                title="Tendência Principal",
                x=time_col.name,
                series=[ChartSeries(g.label or g.name, g.name, "currency" if g.semantic == "currency" else "number") for g in trend],
            ))
            tabs.insert(tabs.index("Detalhes"), "Tendências")

    return DashboardSpec(
        version=1,
        title=title,
        time=TimeConfig(column=time_col.name, type="date") if time_col else None,
        columns=[
            SpecColumn(g.name, g.type, PercentScale.UNIT if g.semantic == "percent" else None, label=g.label)
            for g in guesses
        ],
        kpis=kpis,
        funnel=funnel,
        charts=charts,
        ui=replace(ui, tabs=tabs),
    )


# ----------------------------------------------------------------------------
# repair
# ----------------------------------------------------------------------------

def _repair_time(time: TimeConfig | None, actual: list[str], warnings: list[str]) -> TimeConfig | None:
    if time is None or not time.column or time.column in actual:
        return time
    alt = next((c for c in actual if any(h in c.lower() for h in _TIME_HINTS)), None)
    if alt is None:
        warnings.append("Time configuration removed (column not found)")
        return None
    warnings.append(f"Time column corrected to {alt}")
    return replace(time, column=alt)


def _repair_kpis(kpis: list[KPIDef], actual: set[str], numeric: set[str], warnings: list[str]) -> list[KPIDef]:
    valid = []
    for kpi in kpis:
        if not kpi.column:
            warnings.append(f'KPI "{kpi.label}" removed: no column defined')
            continue
        if kpi.column not in actual:
            warnings.append(f'KPI "{kpi.label}" removed: column {kpi.column} does not exist')
            continue
        if kpi.column not in numeric and kpi.agg != "count":
            warnings.append(f'KPI "{kpi.label}": column {kpi.column} is not numeric')
            continue
        valid.append(kpi if kpi.label else replace(kpi, label=kpi.column))
    return valid


def _repair_funnel(funnel: FunnelDef, actual: set[str], numeric: set[str], warnings: list[str]) -> FunnelDef | None:
    steps = []
    for step in funnel.steps:
        if not step.column:
            warnings.append("Funnel step removed: invalid column")
        elif step.column not in actual:
            warnings.append(f'Step "{step.label}" removed: column {step.column} does not exist')
        elif step.column not in numeric:
            warnings.append(f'Step "{step.label}": column is not numeric')
        else:
            steps.append(step if step.label else replace(step, label=step.column))
    if len(steps) < MIN_FUNNEL_STEPS:
        warnings.append(f"Funnel removed: fewer than {MIN_FUNNEL_STEPS} valid steps")
        return None
    return replace(funnel, steps=steps)


def _repair_series(series: list[ChartSeries], actual: set[str], numeric: set[str], warnings: list[str]) -> list[ChartSeries]:
    valid = []
    for s in series:
        if not s.y:
            warnings.append("Series removed: invalid column")
        elif s.y not in actual:
            warnings.append(f'Series "{s.label}" removed: column {s.y} does not exist')
        elif s.y not in numeric:
            warnings.append(f'Series "{s.label}": column is not numeric')
        else:
            valid.append(s if s.label else replace(s, label=s.y))
    return valid


def _repair_charts(
    charts: list[ChartDef],
    time: TimeConfig | None,
    actual: list[str],
    numeric: set[str],
    warnings: list[str],
) -> list[ChartDef]:
    actual_set = set(actual)
    valid = []
    for chart in charts:
        x = chart.x
        if not x or x not in actual_set:
            alt = (time.column if time else None) or next((c for c in actual if "dia" in c.lower()), None)
            if not alt:
                warnings.append(f'Chart "{chart.title}" removed: no valid X axis')
                continue
            warnings.append(f'Chart "{chart.title}": X axis corrected to {alt}')
            x = alt
        series = _repair_series(chart.series, actual_set, numeric, warnings)
        if not series:
            warnings.append(f'Chart "{chart.title}" removed: no valid series')
            continue
        valid.append(replace(chart, x=x, series=series, title=chart.title or "Gráfico"))
    return valid


def _ensure_ui(ui: UISettings | None, has_funnel: bool, has_charts: bool) -> UISettings:
    ui = ui or UISettings()
    tabs = ui.tabs
    if not tabs:
        tabs = list(FALLBACK_TABS)
        if has_funnel:
            tabs.insert(2, "Funil")
        if has_charts:
            tabs.insert(tabs.index("Detalhes"), "Tendências")
    return replace(ui, tabs=tabs, default_tab=ui.default_tab or FALLBACK_TABS[0])


def validate_spec_against_data(
    spec: DashboardSpec | None,
    rows: Sequence[Any],
    dataset_name: str | None = None,
) -> SpecCheckResult:
    """Check a spec's column references against the data and repair it.

    The input spec is not modified; ``fixed_spec`` is a new document.
    """
    if spec is None or not rows:
        return SpecCheckResult(
            valid=bool(rows),
            fixed_spec=generate_fallback_spec(rows, dataset_name),
            errors=[] if rows else ["No data to display"],
            warnings=[] if spec is not None else ["Using automatically generated spec"],
            compatibility_mode=not rows,
        )

    first = _first_row(rows)
    actual = [str(k) for k in first.keys()]
    actual_set = set(actual)
    numeric = {str(k) for k, v in first.items() if _is_finite_number(v)}
    warnings: list[str] = []

    version = spec.version
    if not version:
        version = 1
        warnings.append("Version added to spec")

    time = _repair_time(spec.time, actual, warnings)
    kpis = _repair_kpis(spec.kpis, actual_set, numeric, warnings) if spec.kpis is not None else None
    funnel = _repair_funnel(spec.funnel, actual_set, numeric, warnings) if spec.funnel is not None else None
    charts = _repair_charts(spec.charts, time, actual, numeric, warnings) if spec.charts is not None else None

    columns = None
    if spec.columns is not None:
        columns = []
        for col in spec.columns:
            if col.name not in actual_set:
                warnings.append(f"Column {col.name} removed: not in dataset")
                continue
            columns.append(col)

    fixed = replace(
        spec,
        version=version,
        time=time,
        kpis=kpis,
        funnel=funnel,
        charts=charts,
        columns=columns,
        ui=_ensure_ui(spec.ui, funnel is not None, bool(charts)),
    )

    if len(warnings) > COMPATIBILITY_THRESHOLD:
        warnings.append("Compatibility mode enabled due to too many problems")
        return SpecCheckResult(
            valid=True,
            fixed_spec=generate_fallback_spec(rows, fixed.title or dataset_name),
            warnings=warnings + ["Spec regenerated automatically"],
            compatibility_mode=True,
        )
    return SpecCheckResult(valid=True, fixed_spec=fixed, warnings=warnings)
