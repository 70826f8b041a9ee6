from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from ..models.column import ColumnType, PercentScale
from ..models.spec import (
    ChartDef,
    ChartSeries,
    DashboardSpec,
    FunnelDef,
    FunnelStep,
    GoalDef,
    KPIDef,
    SpecColumn,
    TimeConfig,
    UISettings,
)

"""Dashboard spec parsing & validation.

Field-by-field coercion of an externally supplied spec document. Policy:
- non-object input or a missing numeric ``version`` -> None (logged)
- every optional section is validated independently; malformed array
  entries are dropped, the rest of the document survives
- never raises
"""

__all__ = [
    "SpecValidation",
    "parse_dashboard_spec",
    "validate_spec_json",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SpecValidation:
    valid: bool
    error: str | None = None
    spec: DashboardSpec | None = None


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _text(value: Any, default: str = "") -> str:
    """JS-style ``String(value || default)``."""
    return str(value) if value else default


def _entries(value: Any) -> list[Mapping[str, Any]]:
    """Array items that are objects; anything else is dropped."""
    if not isinstance(value, list):
        return []
    return [v for v in value if isinstance(v, Mapping)]


def _optional_text(value: Any) -> str | None:
    return None if value is None else str(value)


def _parse_time(raw: Any) -> TimeConfig | None:
    if not isinstance(raw, Mapping):
        return None
    return TimeConfig(column=_text(raw.get("column"), "dia"), type=_text(raw.get("type"), "date"))


def _parse_columns(raw: Any) -> list[SpecColumn]:
    columns = []
    for col in _entries(raw):
        name = _text(col.get("name"))
        if not name:
            continue
        columns.append(SpecColumn(
            name=name,
            type=ColumnType.coerce(col.get("type") or "string", default=ColumnType.STRING),
            scale=PercentScale.coerce(col.get("scale")),
            label=_optional_text(col.get("label")),
            format=_optional_text(col.get("format")),
        ))
    return columns


def _parse_kpis(raw: Any) -> list[KPIDef]:
    kpis = []
    for kpi in _entries(raw):
        label, column = _text(kpi.get("label")), _text(kpi.get("column"))
        if not (label and column):
            continue
        kpis.append(KPIDef(
            label=label,
            column=column,
            agg=_text(kpi.get("agg"), "sum"),
            format=_text(kpi.get("format"), "number"),
            goal=kpi["goal"] if _is_number(kpi.get("goal")) else None,
            goal_direction=_optional_text(kpi.get("goalDirection")),
        ))
    return kpis


def _parse_steps(raw: Any) -> list[FunnelStep]:
    steps = []
    for step in _entries(raw):
        label, column = _text(step.get("label")), _text(step.get("column"))
        if label and column:
            steps.append(FunnelStep(label=label, column=column))
    return steps


def _parse_series(raw: Any) -> list[ChartSeries]:
    series = []
    for s in _entries(raw):
        label, y = _text(s.get("label")), _text(s.get("y"))
        if label and y:
            series.append(ChartSeries(
                label=label, y=y, format=_text(s.get("format"), "number"), color=_optional_text(s.get("color")),
            ))
    return series


def _parse_charts(raw: Any) -> list[ChartDef]:
    charts = []
    for chart in _entries(raw):
        title = _text(chart.get("title"))
        series = _parse_series(chart.get("series"))
        if not (title and series):
            continue
        charts.append(ChartDef(
            type=_text(chart.get("type"), "line"),
            title=title,
            x=_text(chart.get("x"), "dia"),
            series=series,
        ))
    return charts


def _parse_goals(raw: Any) -> list[GoalDef]:
    goals = []
    for goal in _entries(raw):
        metric = _text(goal.get("metric"))
        if not metric:
            continue
        goals.append(GoalDef(
            metric=metric,
            op=_text(goal.get("op"), "<="),
            value=goal["value"] if _is_number(goal.get("value")) else 0,
            label=_optional_text(goal.get("label")),
        ))
    return goals


def _parse_ui(raw: Any) -> UISettings | None:
    if not isinstance(raw, Mapping):
        return None
    tabs = raw.get("tabs")
    presets = raw.get("datePresets")
    compare = raw.get("comparePeriods")
    refresh = raw.get("refreshInterval")
    return UISettings(
        tabs=[str(t) for t in tabs] if isinstance(tabs, list) else None,
        default_tab=_optional_text(raw.get("defaultTab")),
        compare_periods=bool(compare) if compare is not None else None,
        date_presets=list(presets) if isinstance(presets, list) else None,
        refresh_interval=refresh if _is_number(refresh) else None,
    )


def _build_spec(data: Mapping[str, Any]) -> DashboardSpec:
    funnel = None
    raw_funnel = data.get("funnel")
    if isinstance(raw_funnel, Mapping) and isinstance(raw_funnel.get("steps"), list):
        funnel = FunnelDef(steps=_parse_steps(raw_funnel["steps"]))

    return DashboardSpec(
        version=data["version"],
        title=str(data["title"]) if data.get("title") else None,
        time=_parse_time(data.get("time")),
        columns=_parse_columns(data["columns"]) if isinstance(data.get("columns"), list) else None,
        kpis=_parse_kpis(data["kpis"]) if isinstance(data.get("kpis"), list) else None,
        funnel=funnel,
        charts=_parse_charts(data["charts"]) if isinstance(data.get("charts"), list) else None,
        goals=_parse_goals(data["goals"]) if isinstance(data.get("goals"), list) else None,
        ui=_parse_ui(data.get("ui")),
    )


def parse_dashboard_spec(data: Any) -> DashboardSpec | None:
    """Parse and sanitize a spec document.

    Returns None when the input is not an object or has no numeric
    ``version``; malformed optional entries are silently dropped.
    """
    if not isinstance(data, Mapping):
        logger.warning("dashboard spec rejected: not an object")
        return None
    if not _is_number(data.get("version")):
        logger.warning("dashboard spec rejected: missing numeric version")
        return None
    try:
        return _build_spec(data)
    except Exception as e:
        logger.warning(f"dashboard spec rejected: {e}")
        return None


def validate_spec_json(json_string: str) -> SpecValidation:
    """Parse a spec JSON string; syntax and structure errors become ``valid=False``."""
    try:
        parsed = json.loads(json_string)
    except (ValueError, TypeError, RecursionError) as e:  # JSONDecodeError is a ValueError
        return SpecValidation(valid=False, error=str(e))
    spec = parse_dashboard_spec(parsed)
    if spec is None:
        return SpecValidation(valid=False, error="Invalid spec structure")
    return SpecValidation(valid=True, spec=spec)
