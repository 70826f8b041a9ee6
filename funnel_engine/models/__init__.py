"""Domain models for the funnel dataset engine.

Column descriptors, warnings and the normalized dataset produced by the
normalizer, plus the DashboardSpec / TemplateConfig documents consumed by the
view layer.
"""

from .column import NUMERIC_TYPES, ColumnDescriptor, ColumnStats, ColumnType, PercentScale
from .dataset import NormalizedDataset, NormalizedRow
from .quality_report import ConsistencyCheck, DataQualityReport, QualityWarning
from .spec import (
    DEFAULT_DASHBOARD_SPEC,
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
from .template import ColumnConfig, TemplateConfig
from .warning import NormalizationWarning

__all__ = [
    # Dataset models
    "ColumnType",
    "PercentScale",
    "ColumnDescriptor",
    "ColumnStats",
    "NUMERIC_TYPES",
    "NormalizationWarning",
    "NormalizedDataset",
    "NormalizedRow",
    # Spec / template documents
    "DashboardSpec",
    "SpecColumn",
    "TimeConfig",
    "KPIDef",
    "FunnelStep",
    "FunnelDef",
    "ChartSeries",
    "ChartDef",
    "GoalDef",
    "UISettings",
    "DEFAULT_DASHBOARD_SPEC",
    "ColumnConfig",
    "TemplateConfig",
    # Quality
    "QualityWarning",
    "DataQualityReport",
    "ConsistencyCheck",
]
