from __future__ import annotations

import pytest

from funnel_engine.services.labels import COLUMN_LABELS, get_column_label, get_goal_direction


def test_known_and_fallback_labels():
    assert get_column_label("reuniao_realizada_total") == "Reuniões Realizadas"
    assert get_column_label("custo_extra") == "Custo Extra"
    assert get_column_label("x") == "X"


def test_goal_direction():
    assert get_goal_direction("cac") == "lower_better"
    assert get_goal_direction("venda_total") == "higher_better"
    assert get_goal_direction("anything") == "higher_better"


def test_tables_are_read_only():
    with pytest.raises(TypeError):
        COLUMN_LABELS["dia"] = "Dia"  # type: ignore[index]
