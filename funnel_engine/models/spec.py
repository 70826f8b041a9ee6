from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .column import ColumnType, PercentScale

"""DashboardSpec document models.

A DashboardSpec is the declarative configuration deciding which KPIs, funnel
steps, charts and tabs a dashboard shows. It is an immutable document: parsing
(services.spec_parser) builds one from JSON, inference (services.inference)
derives one from a column list, and ``to_dict`` renders it back to the
camelCase JSON shape used for persistence.
"""

__all__ = [
    "SpecColumn",
    "TimeConfig",
    "KPIDef",
    "FunnelStep",
    "FunnelDef",
    "ChartSeries",
    "ChartDef",
    "GoalDef",
    "UISettings",
    "DashboardSpec",
    "DEFAULT_TABS",
    "DEFAULT_DASHBOARD_SPEC",
]


def _compact(d: dict[str, Any]) -> dict[str, Any]:
    """Drop None values (optional JSON keys are omitted, not null)."""
    return {k: v for k, v in d.items() if v is not None}


@dataclass(frozen=True)
class SpecColumn:
    """Column declaration; ``type``/``scale`` override type inference."""
    name: str
    type: ColumnType = ColumnType.STRING
    scale: PercentScale | None = None
    label: str | None = None
    format: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return _compact({
            "name": self.name,
            "type": self.type.value,
            "scale": self.scale.value if self.scale else None,
            "label": self.label,
            "format": self.format,
        })


@dataclass(frozen=True)
class TimeConfig:
    column: str = "dia"
    type: str = "date"  # date | datetime

    def to_dict(self) -> dict[str, Any]:
        return {"column": self.column, "type": self.type}


@dataclass(frozen=True)
class KPIDef:
    label: str
    column: str
    agg: str = "sum"  # sum | avg | min | max | count | last
    format: str = "number"  # currency | number | percent | integer
    goal: float | None = None
    goal_direction: str | None = None  # higher_better | lower_better

    def to_dict(self) -> dict[str, Any]:
        return _compact({
            "label": self.label,
            "column": self.column,
            "agg": self.agg,
            "format": self.format,
            "goal": self.goal,
            "goalDirection": self.goal_direction,
        })


@dataclass(frozen=True)
class FunnelStep:
    label: str
    column: str

    def to_dict(self) -> dict[str, Any]:
        return {"label": self.label, "column": self.column}


@dataclass(frozen=True)
class FunnelDef:
    steps: list[FunnelStep] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"steps": [s.to_dict() for s in self.steps]}


@dataclass(frozen=True)
class ChartSeries:
    label: str
    y: str
    format: str = "number"  # currency | number | percent
    color: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return _compact({"label": self.label, "y": self.y, "format": self.format, "color": self.color})


@dataclass(frozen=True)
class ChartDef:
    title: str
    x: str
    series: list[ChartSeries] = field(default_factory=list)
    type: str = "line"  # line | bar | area | pie

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "title": self.title,
            "x": self.x,
            "series": [s.to_dict() for s in self.series],
        }


@dataclass(frozen=True)
class GoalDef:
    metric: str
    op: str = "<="  # <= | >= | < | > | =
    value: float = 0
    label: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return _compact({"metric": self.metric, "op": self.op, "value": self.value, "label": self.label})


@dataclass(frozen=True)
class UISettings:
    tabs: list[str] | None = None
    default_tab: str | None = None
    compare_periods: bool | None = None
    date_presets: list[Any] | None = None
    refresh_interval: float | None = None

    def to_dict(self) -> dict[str, Any]:
        return _compact({
            "tabs": list(self.tabs) if self.tabs is not None else None,
            "defaultTab": self.default_tab,
            "comparePeriods": self.compare_periods,
            "datePresets": list(self.date_presets) if self.date_presets is not None else None,
            "refreshInterval": self.refresh_interval,
        })


@dataclass(frozen=True)
class DashboardSpec:
    version: float
    title: str | None = None
    time: TimeConfig | None = None
    columns: list[SpecColumn] | None = None
    kpis: list[KPIDef] | None = None
    funnel: FunnelDef | None = None
    charts: list[ChartDef] | None = None
    goals: list[GoalDef] | None = None
    ui: UISettings | None = None

    def to_dict(self) -> dict[str, Any]:
        """Render the camelCase JSON document (absent sections omitted)."""
        return _compact({
            "version": self.version,
            "title": self.title,
            "time": self.time.to_dict() if self.time else None,
            "columns": [c.to_dict() for c in self.columns] if self.columns is not None else None,
            "kpis": [k.to_dict() for k in self.kpis] if self.kpis is not None else None,
            "funnel": self.funnel.to_dict() if self.funnel else None,
            "charts": [c.to_dict() for c in self.charts] if self.charts is not None else None,
            "goals": [g.to_dict() for g in self.goals] if self.goals is not None else None,
            "ui": self.ui.to_dict() if self.ui else None,
        })


DEFAULT_TABS = ("Executivo", "Detalhes")

DEFAULT_DASHBOARD_SPEC = DashboardSpec(
    version=1,
    ui=UISettings(tabs=list(DEFAULT_TABS), default_tab="Executivo", compare_periods=True),
)
