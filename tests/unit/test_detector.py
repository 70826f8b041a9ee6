from __future__ import annotations

from datetime import date

import pytest

from funnel_engine.models.column import ColumnType
from funnel_engine.services.detector import detect_by_name, detect_column_type


@pytest.mark.parametrize(
    "name, expected",
    [
        ("dia", ColumnType.DATE),
        ("created_at", ColumnType.DATE),
        ("taxa_entrada", ColumnType.PERCENT),
        ("conversion_pct", ColumnType.PERCENT),
        ("custo_total", ColumnType.CURRENCY),  # currency beats count
        ("CPL", ColumnType.CURRENCY),
        ("receita", ColumnType.CURRENCY),
        ("leads_total", ColumnType.NUMBER),
        ("qtd_vendas", ColumnType.NUMBER),
        ("canal", None),
    ],
)
def test_detect_by_name(name, expected):
    assert detect_by_name(name) == expected


def test_name_wins_over_values():
    assert detect_column_type("custo_total", ["abc", "def"]) == ColumnType.CURRENCY


def test_empty_name_is_unknown():
    assert detect_column_type("", ["1"]) == ColumnType.UNKNOWN
    assert detect_column_type("   ") == ColumnType.UNKNOWN


def test_no_samples_is_unknown():
    assert detect_column_type("canal") == ColumnType.UNKNOWN
    assert detect_column_type("canal", [None, None]) == ColumnType.UNKNOWN


def test_value_sniffing_order():
    assert detect_column_type("inicio", ["2024-01-01", "05/02/2024", None]) == ColumnType.DATE
    assert detect_column_type("inicio", [date(2024, 1, 1)]) == ColumnType.DATE
    assert detect_column_type("score", ["1,5", 3, None]) == ColumnType.NUMBER
    assert detect_column_type("ativo", ["true", False]) == ColumnType.BOOLEAN
    assert detect_column_type("canal", ["google", "meta"]) == ColumnType.STRING


def test_numeric_samples_are_sniffed_as_timestamps():
    assert detect_column_type("score", [1709251200, 1709337600]) == ColumnType.DATE
    assert detect_column_type("score", [1709251200000, None]) == ColumnType.DATE
    # bools are not timestamps
    assert detect_column_type("ativo", [True, False]) == ColumnType.BOOLEAN
