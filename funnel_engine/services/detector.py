from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from ..models.column import ColumnType
from ..parsing.scalars import parse_date, parse_number

"""Column type detection.

Two stages:
1. Name patterns (curated keyword lists, first matching category wins in the
   fixed order date > percent > currency > count)
2. Value sampling when no name pattern matched

Name matching is a substring test on the lower-cased name, so "custo_total"
is currency and not count.
"""

__all__ = [
    "DATE_PATTERNS",
    "PERCENT_PATTERNS",
    "CURRENCY_PATTERNS",
    "COUNT_PATTERNS",
    "detect_by_name",
    "detect_column_type",
]

DATE_PATTERNS = ("dia", "date", "created_at", "updated_at", "data", "dt_", "timestamp")
PERCENT_PATTERNS = ("taxa_", "rate_", "percent", "pct", "%", "conversion", "ratio")
CURRENCY_PATTERNS = ("custo", "cpl", "cac", "valor", "price", "preco", "investimento", "revenue", "receita")
COUNT_PATTERNS = ("_total", "_count", "leads", "vendas", "entradas", "qtd", "quantidade")

_NAME_RULES: tuple[tuple[tuple[str, ...], ColumnType], ...] = (
    (DATE_PATTERNS, ColumnType.DATE),
    (PERCENT_PATTERNS, ColumnType.PERCENT),
    (CURRENCY_PATTERNS, ColumnType.CURRENCY),
    (COUNT_PATTERNS, ColumnType.NUMBER),
)


def detect_by_name(column_name: str) -> ColumnType | None:
    """Type implied by the column name alone, or None when no pattern matches."""
    key = str(column_name).strip().lower()
    for patterns, col_type in _NAME_RULES:
        if any(p in key for p in patterns):
            return col_type
    return None


def _looks_like_date(value: Any) -> bool:
    # numbers count too: parse_date reads them as UNIX timestamps
    return parse_date(value) is not None


def _looks_like_number(value: Any) -> bool:
    return parse_number(value) is not None


def _looks_like_boolean(value: Any) -> bool:
    return isinstance(value, bool) or value in ("true", "false")


def detect_column_type(column_name: str, sample_values: Sequence[Any] = ()) -> ColumnType:
    """Infer the semantic type of a column from its name, then its values."""
    if not str(column_name).strip():
        return ColumnType.UNKNOWN

    by_name = detect_by_name(column_name)
    if by_name is not None:
        return by_name

    non_null = [v for v in sample_values if v is not None]
    if not non_null:
        return ColumnType.UNKNOWN

    if all(_looks_like_date(v) for v in non_null):
        return ColumnType.DATE
    if all(_looks_like_number(v) for v in non_null):
        return ColumnType.NUMBER
    if all(_looks_like_boolean(v) for v in non_null):
        return ColumnType.BOOLEAN
    return ColumnType.STRING
