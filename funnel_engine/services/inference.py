from __future__ import annotations

from collections.abc import Mapping, Sequence
from types import MappingProxyType
from typing import Any

from ..models.column import ColumnType, PercentScale
from ..models.spec import (
    DEFAULT_TABS,
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
from ..parsing.scalars import detect_percent_scale, parse_number
from .detector import detect_column_type

"""Spec inference: derive a DashboardSpec from a column list.

Deterministic and rule based. Used only when no valid spec exists; missing
columns narrow the result (fewer KPIs, no funnel, fewer tabs), they are never
an error.
"""

__all__ = [
    "KNOWN_COLUMNS",
    "KPI_CANDIDATES",
    "FUNNEL_COLUMNS",
    "MIN_FUNNEL_STAGES",
    "generate_spec_from_data",
]

KNOWN_COLUMNS: Mapping[str, SpecColumn] = MappingProxyType({
    "dia": SpecColumn("dia", ColumnType.DATE, label="Data"),
    "custo_total": SpecColumn("custo_total", ColumnType.CURRENCY, label="Custo Total"),
    "leads_total": SpecColumn("leads_total", ColumnType.NUMBER, label="Leads"),
    "entrada_total": SpecColumn("entrada_total", ColumnType.NUMBER, label="Entradas"),
    "reuniao_agendada_total": SpecColumn("reuniao_agendada_total", ColumnType.NUMBER, label="Reuniões Agendadas"),
    "reuniao_realizada_total": SpecColumn("reuniao_realizada_total", ColumnType.NUMBER, label="Reuniões Realizadas"),
    "venda_total": SpecColumn("venda_total", ColumnType.NUMBER, label="Vendas"),
    "cpl": SpecColumn("cpl", ColumnType.CURRENCY, label="CPL"),
    "cac": SpecColumn("cac", ColumnType.CURRENCY, label="CAC"),
    "taxa_entrada": SpecColumn("taxa_entrada", ColumnType.PERCENT, PercentScale.UNIT, label="Taxa de Entrada"),
    "taxa_comparecimento": SpecColumn(
        "taxa_comparecimento", ColumnType.PERCENT, PercentScale.UNIT, label="Taxa de Comparecimento"
    ),
    "taxa_venda_total": SpecColumn("taxa_venda_total", ColumnType.PERCENT, PercentScale.UNIT, label="Taxa de Conversão"),
})

KPI_CANDIDATES = ("custo_total", "leads_total", "entrada_total", "venda_total", "cpl", "cac")
RATIO_METRICS = ("cpl", "cac")
FUNNEL_COLUMNS = ("leads_total", "entrada_total", "reuniao_agendada_total", "reuniao_realizada_total", "venda_total")
MIN_FUNNEL_STAGES = 3


def _infer_column(name: str, sample_row: Mapping[str, Any] | None) -> SpecColumn:
    known = KNOWN_COLUMNS.get(name)
    if known is not None:
        return known

    samples = [sample_row[name]] if sample_row and name in sample_row else []
    col_type = detect_column_type(name, samples)
    if col_type == ColumnType.UNKNOWN:
        col_type = ColumnType.STRING
    scale = None
    if col_type == ColumnType.PERCENT:
        numbers = [n for n in (parse_number(v) for v in samples) if n is not None]
        scale = detect_percent_scale(numbers)
    return SpecColumn(name, col_type, scale)


def _is_cost_metric(column: str) -> bool:
    return "custo" in column or column in RATIO_METRICS


def _label(column: str) -> str:
    known = KNOWN_COLUMNS.get(column)
    return known.label if known is not None and known.label else column


def _build_kpis(present: set[str]) -> list[KPIDef]:
    kpis = []
    for col in KPI_CANDIDATES:
        if col not in present:
            continue
        cost = _is_cost_metric(col)
        kpis.append(KPIDef(
            label=_label(col),
            column=col,
            agg="avg" if col in RATIO_METRICS else "sum",
            format="currency" if cost else "integer",
            goal_direction="lower_better" if cost else "higher_better",
        ))
    return kpis


def _build_charts(date_column: str, present: set[str]) -> tuple[list[ChartDef], bool]:
    """Trend charts over the date column; the flag tells whether the efficiency chart exists."""
    charts = []
    if "custo_total" in present and "leads_total" in present:
        charts.append(ChartDef(
            title="Tendência • Custo x Leads",
            x=date_column,
            series=[
                ChartSeries("Custo Total", "custo_total", "currency"),
                ChartSeries("Leads", "leads_total", "number"),
            ],
        ))
    efficiency = "cpl" in present and "cac" in present
    if efficiency:
        charts.append(ChartDef(
            title="Eficiência • CPL x CAC",
            x=date_column,
            series=[
                ChartSeries("CPL", "cpl", "currency"),
                ChartSeries("CAC", "cac", "currency"),
            ],
        ))
    return charts, efficiency


def _tabs(has_funnel: bool, has_charts: bool, has_efficiency: bool) -> list[str]:
    """Tabs in display order, each one listed only when it has content.

    "Funil" needs the funnel (>= 3 canonical stages); a CPL x CAC chart on its
    own does not add it. "Eficiência" comes with the CPL x CAC chart.
    "Tendências" comes with the funnel or with any chart, so a dataset with
    only cost and lead trend columns still gets it. There is no fixed
    five-tab set.
    """
    tabs = [DEFAULT_TABS[0]]
    if has_funnel:
        tabs.append("Funil")
    if has_efficiency:
        tabs.append("Eficiência")
    if has_funnel or has_charts:
        tabs.append("Tendências")
    tabs.append(DEFAULT_TABS[1])
    return tabs


def generate_spec_from_data(
    columns: Sequence[str], sample_row: Mapping[str, Any] | None = None
) -> DashboardSpec:
    """Derive a DashboardSpec from the dataset's column names.

    Args:
        columns: column names, in dataset order
        sample_row: one raw row, used as a single-value sample for columns
            outside the known-column table

    Returns:
        A new spec; tabs start at ("Executivo", "Detalhes") and widen with
        "Funil" (>= 3 canonical funnel stages), "Tendências" and "Eficiência"
        (CPL x CAC chart)
    """
    names = [str(c) for c in columns]
    present = set(names)
    spec_columns = [_infer_column(name, sample_row) for name in names]

    funnel = None
    stages = [c for c in FUNNEL_COLUMNS if c in present]
    if len(stages) >= MIN_FUNNEL_STAGES:
        funnel = FunnelDef(steps=[FunnelStep(label=_label(c), column=c) for c in stages])

    time = None
    charts: list[ChartDef] = []
    efficiency = False
    date_column = next((c.name for c in spec_columns if c.type == ColumnType.DATE), None)
    if date_column is not None:
        time = TimeConfig(column=date_column, type="date")
        charts, efficiency = _build_charts(date_column, present)

    tabs = _tabs(funnel is not None, bool(charts), efficiency)
    return DashboardSpec(
        version=1,
        time=time,
        columns=spec_columns,
        kpis=_build_kpis(present),
        funnel=funnel,
        charts=charts or None,
        ui=UISettings(tabs=tabs, default_tab=tabs[0], compare_periods=True),
    )
