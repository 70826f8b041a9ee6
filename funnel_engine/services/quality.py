from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from ..config.loader import DEFAULT_CONFIG, EngineConfig
from ..models.quality_report import ConsistencyCheck, DataQualityReport, QualityWarning
from ..parsing.scalars import is_truthy, parse_date

"""Data quality report for a row set.

Codes: NO_DATA, LOW_TIME_PARSE_RATE (sets degraded_mode), ZERO_TRUTHY,
ALL_TRUTHY, HIGH_NULL_RATE. Messages are pt-BR, shown to dashboard users.
"""

__all__ = [
    "FUNNEL_INVERSION_TOLERANCE",
    "analyze_data_quality",
    "check_funnel_consistency",
    "check_kpi_consistency",
]

FUNNEL_INVERSION_TOLERANCE = 1.1


def _cell(row: Any, column: str) -> Any:
    return row.get(column) if isinstance(row, Mapping) else None


def analyze_data_quality(
    rows: Sequence[Any],
    time_column: str | None,
    stage_columns: Sequence[str],
    config: EngineConfig | None = None,
) -> DataQualityReport:
    cfg = config or DEFAULT_CONFIG
    total = len(rows)
    if total == 0:
        return DataQualityReport(
            total_rows=0,
            warnings=[QualityWarning("NO_DATA", "warning", "Nenhuma linha de dados encontrada")],
        )

    warnings: list[QualityWarning] = []
    time_parse_rate = 0.0
    degraded = False
    if time_column:
        parsed = sum(1 for r in rows if parse_date(_cell(r, time_column), cfg.timestamp_ms_threshold) is not None)
        time_parse_rate = parsed / total
        if time_parse_rate < cfg.min_time_parse_rate:
            warnings.append(QualityWarning(
                "LOW_TIME_PARSE_RATE",
                "warning",
                f'Coluna de tempo "{time_column}" tem {round(time_parse_rate * 100)}% de parse válido',
                column=time_column,
                value=time_parse_rate,
            ))
            degraded = True

    truthy_rates: dict[str, float] = {}
    null_rates: dict[str, float] = {}
    for col in stage_columns:
        present = [_cell(r, col) for r in rows if _cell(r, col) is not None]
        rate = sum(1 for v in present if is_truthy(v)) / len(present) if present else 0.0
        truthy_rates[col] = rate
        null_rates[col] = (total - len(present)) / total
        if rate == 0:
            warnings.append(QualityWarning(
                "ZERO_TRUTHY", "info", f'Coluna "{col}" tem 0% de valores truthy', column=col, value=0.0,
            ))
        elif rate == 1:
            warnings.append(QualityWarning(
                "ALL_TRUTHY", "info", f'Coluna "{col}" tem 100% de valores truthy', column=col, value=1.0,
            ))

    first = rows[0] if isinstance(rows[0], Mapping) else {}
    for col in first:
        null_rate = sum(1 for r in rows if _cell(r, col) is None) / total
        null_rates[col] = null_rate
        if null_rate > cfg.high_null_rate and col not in stage_columns:
            warnings.append(QualityWarning(
                "HIGH_NULL_RATE",
                "info",
                f'Coluna "{col}" tem {round(null_rate * 100)}% de valores nulos',
                column=col,
                value=null_rate,
            ))

    return DataQualityReport(
        total_rows=total,
        time_parse_rate=time_parse_rate,
        truthy_rates=truthy_rates,
        null_rates=null_rates,
        warnings=warnings,
        degraded_mode=degraded,
    )


def check_funnel_consistency(stages: Sequence[tuple[str, float]]) -> ConsistencyCheck:
    """Flag stages that exceed the previous stage by more than 10%."""
    issues = []
    for (prev_stage, prev_value), (stage, value) in zip(stages, stages[1:]):
        if value > prev_value * FUNNEL_INVERSION_TOLERANCE:
            issues.append(f'"{stage}" ({value}) > "{prev_stage}" ({prev_value})')
    return ConsistencyCheck(valid=not issues, issues=issues)


def check_kpi_consistency(kpis: Mapping[str, float]) -> ConsistencyCheck:
    """Sales above leads invalidate the set; out-of-range rates are reported only."""
    valid = True
    issues = []
    venda, leads = kpis.get("venda"), kpis.get("leads_total")
    if venda is not None and leads is not None and venda > leads:
        valid = False
        issues.append(f"Vendas ({venda}) > Leads ({leads})")
    for key, value in kpis.items():
        if (key.startswith("taxa_") or "_rate" in key) and not 0 <= value <= 100:
            issues.append(f'Taxa "{key}" fora do range: {value}')
    return ConsistencyCheck(valid=valid, issues=issues)
