from __future__ import annotations

from collections.abc import Mapping, Sequence
from types import MappingProxyType
from typing import Any

from ..models.column import ColumnType
from ..models.template import TAB_ORDER, ColumnConfig, TemplateConfig
from .detector import detect_by_name
from .inference import FUNNEL_COLUMNS, MIN_FUNNEL_STAGES
from .labels import get_column_label

"""Template configuration from column names alone.

The degraded path: no DashboardSpec, no sample values, just names. Overrides
(a named preset and/or a custom dict, camelCase keys as stored in dashboard
documents) replace the derived values key by key.
"""

__all__ = [
    "TEMPLATE_PRESETS",
    "analyze_columns",
    "generate_template_config",
]

_TEMPLATE_TYPES = MappingProxyType({
    ColumnType.DATE: "date",
    ColumnType.PERCENT: "percent",
    ColumnType.CURRENCY: "currency",
    ColumnType.NUMBER: "integer",
})

_LOSS_PATTERNS = ("falta", "desmarque", "perdido")
_MAX_KPIS = 7

TEMPLATE_PRESETS: Mapping[str, Mapping[str, Any]] = MappingProxyType({
    "funnel_full": MappingProxyType({
        "enabledTabs": list(TAB_ORDER),
        "kpis": ["custo_total", "leads_total", "entrada_total", "reuniao_realizada_total", "venda_total", "cpl", "cac"],
        "funnelStages": {
            "leads_total": "Leads",
            "entrada_total": "Entradas",
            "reuniao_agendada_total": "Reuniões Agendadas",
            "reuniao_realizada_total": "Reuniões Realizadas",
            "venda_total": "Vendas",
        },
        "goals": {
            "cpl": 20,
            "cac": 200,
            "taxa_entrada": 0.2,
            "taxa_comparecimento": 0.7,
        },
    }),
})


def analyze_columns(columns: Sequence[str]) -> list[ColumnConfig]:
    out = []
    for key in columns:
        col_type = detect_by_name(key)
        out.append(ColumnConfig(
            key=key,
            type=_TEMPLATE_TYPES.get(col_type, "unknown"),
            label=get_column_label(key),
        ))
    return out


def _enabled_tabs(funnel_count: int, cost_metrics: list[str], taxa_columns: list[str], columns: set[str]) -> list[str]:
    tabs = {"executivo", "detalhes"}
    if funnel_count >= MIN_FUNNEL_STAGES:
        tabs.add("funil")
    if len(cost_metrics) >= 2:
        tabs.add("eficiencia")
    if "cpl" in columns or "cac" in columns or taxa_columns:
        tabs.add("tendencias")
    return [t for t in TAB_ORDER if t in tabs]


def generate_template_config(
    columns: Sequence[str],
    template_kind: str = "auto",
    custom_spec: Mapping[str, Any] | None = None,
) -> TemplateConfig:
    """Derive which tabs, KPIs and column groupings to show from names only.

    ``template_kind`` names a preset from TEMPLATE_PRESETS ("auto" = none);
    ``custom_spec`` keys win over the preset, the preset over derived values.
    """
    names = [str(c) for c in columns]
    present = set(names)
    analyzed = analyze_columns(names)

    date_column = next((c.key for c in analyzed if c.type == "date"), "dia")
    funnel_keys = [k for k in FUNNEL_COLUMNS if k in present]
    funnel_stages = {k: get_column_label(k) for k in funnel_keys}
    cost_metrics = [c for c in names if "custo" in c or c in ("cpl", "cac")]
    taxa_columns = [c for c in names if c.startswith("taxa_")]
    loss_columns = [c for c in names if any(p in c for p in _LOSS_PATTERNS)]
    kpis = (funnel_keys[:5] + [c for c in cost_metrics if c in ("cpl", "cac")])[:_MAX_KPIS]
    formatting = {c.key: c.type for c in analyzed if c.type in ("currency", "percent", "integer")}

    overrides: dict[str, Any] = dict(TEMPLATE_PRESETS.get(template_kind, {}))
    overrides.update(custom_spec or {})

    def pick(key: str, derived: Any) -> Any:
        # an explicit empty list or mapping is a real override
        value = overrides.get(key)
        return derived if value is None or value == "" else value

    return TemplateConfig(
        enabled_tabs=list(pick("enabledTabs", _enabled_tabs(len(funnel_keys), cost_metrics, taxa_columns, present))),
        kpis=list(pick("kpis", kpis)),
        funnel_stages=dict(pick("funnelStages", funnel_stages)),
        cost_metrics=list(pick("costMetrics", cost_metrics)),
        taxa_columns=list(pick("taxaColumns", taxa_columns)),
        loss_columns=list(pick("lossColumns", loss_columns)),
        date_column=str(pick("dateColumn", date_column)),
        goals=dict(pick("goals", {})),
        formatting={**formatting, **(overrides.get("formatting") or {})},
    )
