from __future__ import annotations

from dataclasses import dataclass, field

"""TemplateConfig model: the name-pattern-only dashboard layout.

Used when the engine degrades to guessing everything from column names,
without a DashboardSpec.
"""

__all__ = [
    "TAB_ORDER",
    "ColumnConfig",
    "TemplateConfig",
]

TAB_ORDER = ("executivo", "funil", "eficiencia", "tendencias", "detalhes")


@dataclass(frozen=True)
class ColumnConfig:
    key: str
    type: str  # date | currency | integer | percent | text | unknown
    label: str
    format: str | None = None


@dataclass(frozen=True)
class TemplateConfig:
    enabled_tabs: list[str]
    kpis: list[str]
    funnel_stages: dict[str, str]  # column -> display label, in funnel order
    cost_metrics: list[str]
    taxa_columns: list[str]  # rate columns (taxa_*)
    loss_columns: list[str]
    date_column: str
    goals: dict[str, float] = field(default_factory=dict)
    formatting: dict[str, str] = field(default_factory=dict)
