from __future__ import annotations

from dataclasses import dataclass, field

"""Data quality report models (time parse rate, truthy/null rates)."""

__all__ = [
    "QualityWarning",
    "DataQualityReport",
    "ConsistencyCheck",
]


@dataclass(frozen=True)
class QualityWarning:
    code: str
    severity: str  # info | warning | error
    message: str
    column: str | None = None
    value: float | None = None


@dataclass(frozen=True)
class DataQualityReport:
    total_rows: int
    time_parse_rate: float = 0.0
    truthy_rates: dict[str, float] = field(default_factory=dict)
    null_rates: dict[str, float] = field(default_factory=dict)
    warnings: list[QualityWarning] = field(default_factory=list)
    degraded_mode: bool = False


@dataclass(frozen=True)
class ConsistencyCheck:
    valid: bool
    issues: list[str] = field(default_factory=list)
