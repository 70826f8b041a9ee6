"""Funnel dataset normalization & dashboard template inference.

Public entry points: normalize_dataset, the scalar parsers, dashboard spec
parsing, inference and repair, and template config generation.
"""

from .config.loader import DEFAULT_CONFIG, ConfigError, EngineConfig, load_config, resolve_config
from .models import (
    DEFAULT_DASHBOARD_SPEC,
    ColumnDescriptor,
    ColumnType,
    DashboardSpec,
    NormalizationWarning,
    NormalizedDataset,
    PercentScale,
    TemplateConfig,
)
from .parsing.scalars import (
    detect_percent_scale,
    parse_currency,
    parse_date,
    parse_number,
    parse_percent,
)
from .services.detector import detect_column_type
from .services.inference import generate_spec_from_data
from .services.normalizer import normalize_dataset
from .services.quality import analyze_data_quality, check_funnel_consistency, check_kpi_consistency
from .services.spec_parser import parse_dashboard_spec, validate_spec_json
from .services.spec_repair import generate_fallback_spec, validate_spec_against_data
from .services.template import generate_template_config

__version__ = "0.1.0"

__all__ = [
    # Engine
    "normalize_dataset",
    "detect_column_type",
    "parse_number",
    "parse_currency",
    "parse_percent",
    "parse_date",
    "detect_percent_scale",
    # Specs & templates
    "parse_dashboard_spec",
    "validate_spec_json",
    "generate_spec_from_data",
    "validate_spec_against_data",
    "generate_fallback_spec",
    "generate_template_config",
    # Quality
    "analyze_data_quality",
    "check_funnel_consistency",
    "check_kpi_consistency",
    # Models
    "ColumnType",
    "PercentScale",
    "ColumnDescriptor",
    "NormalizationWarning",
    "NormalizedDataset",
    "DashboardSpec",
    "TemplateConfig",
    "DEFAULT_DASHBOARD_SPEC",
    # Config
    "EngineConfig",
    "ConfigError",
    "DEFAULT_CONFIG",
    "load_config",
    "resolve_config",
]
