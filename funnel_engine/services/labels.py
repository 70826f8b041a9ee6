from __future__ import annotations

from types import MappingProxyType

"""Display labels and goal directions for well-known funnel columns.

Static read-only tables; unknown columns fall back to a Title Case label and
``higher_better``.
"""

__all__ = [
    "COLUMN_LABELS",
    "GOAL_DIRECTIONS",
    "get_column_label",
    "get_goal_direction",
]

COLUMN_LABELS = MappingProxyType({
    # time
    "dia": "Data",
    "date": "Data",
    "data": "Data",
    "mes": "Mês",
    "semana": "Semana",
    "periodo": "Período",
    # cost / efficiency
    "custo_total": "Custo Total",
    "cpl": "CPL",
    "cac": "CAC",
    "custo_por_entrada": "Custo/Entrada",
    "custo_por_reuniao_agendada": "Custo/Reunião Agendada",
    "custo_por_reuniao_realizada": "Custo/Reunião Realizada",
    # funnel stages
    "leads_total": "Leads",
    "entrada_total": "Entradas",
    "reuniao_agendada_total": "Reuniões Agendadas",
    "reuniao_realizada_total": "Reuniões Realizadas",
    "venda_total": "Vendas",
    # losses
    "falta_total": "Faltas",
    "desmarque_total": "Desmarques",
    # rates
    "taxa_entrada": "Taxa de Entrada",
    "taxa_reuniao_agendada": "Taxa de Agendamento",
    "taxa_comparecimento": "Taxa de Comparecimento",
    "taxa_venda_pos_reuniao": "Taxa de Venda (pós-reunião)",
    "taxa_venda_total": "Taxa de Conversão Total",
    # dimensions
    "canal": "Canal",
    "campanha": "Campanha",
    "fonte": "Fonte",
    "origem": "Origem",
})

GOAL_DIRECTIONS = MappingProxyType({
    "custo_total": "lower_better",
    "cpl": "lower_better",
    "cac": "lower_better",
    "desmarque_total": "lower_better",
    "falta_total": "lower_better",
    "leads_total": "higher_better",
    "entrada_total": "higher_better",
    "venda_total": "higher_better",
    "taxa_entrada": "higher_better",
    "taxa_comparecimento": "higher_better",
    "taxa_venda_total": "higher_better",
})


def get_column_label(column: str) -> str:
    """Known label, else snake_case -> Title Case ("custo_extra" -> "Custo Extra")."""
    if column in COLUMN_LABELS:
        return COLUMN_LABELS[column]
    return " ".join(w[:1].upper() + w[1:] for w in column.split("_"))


def get_goal_direction(column: str) -> str:
    return GOAL_DIRECTIONS.get(column, "higher_better")
