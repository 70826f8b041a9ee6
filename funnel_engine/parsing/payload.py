from __future__ import annotations

from collections.abc import Mapping, Sequence
from enum import Enum
from typing import Any

"""Raw payload shape classification.

The backend hands over loosely shaped payloads. Instead of duck-typed
branching, the accepted shapes are enumerated here and classified first; the
normalizer then dispatches on the classification.

Accepted row containers (PayloadShape):
- ROWS_KEY   {"rows": [...], "columns": ..., "meta": ...}
- DATA_KEY   {"data": [...], ...}
- BARE_LIST  [...]

Accepted column lists (ColumnsShape):
- NAMES        ["dia", "custo_total"]
- DESCRIPTORS  [{"name": "dia"}, {"key": "custo_total"}, {"label": ...}]
- MAPPING      {"dia": {...}, "custo_total": {...}}  (keys are the names)
"""

__all__ = [
    "PayloadShape",
    "ColumnsShape",
    "classify_payload",
    "classify_columns",
    "extract_rows",
    "extract_column_names",
    "rows_are_arrays",
    "zip_array_rows",
]


class PayloadShape(Enum):
    ROWS_KEY = "rows_key"
    DATA_KEY = "data_key"
    BARE_LIST = "bare_list"
    NO_ROWS = "no_rows"  # an object, but without a rows array
    INVALID = "invalid"  # not an object at all


class ColumnsShape(Enum):
    NAMES = "names"
    DESCRIPTORS = "descriptors"
    MAPPING = "mapping"
    ABSENT = "absent"


def _is_row_array(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def classify_payload(raw: Any) -> PayloadShape:
    if isinstance(raw, Mapping):
        if _is_row_array(raw.get("rows")):
            return PayloadShape.ROWS_KEY
        if _is_row_array(raw.get("data")):
            return PayloadShape.DATA_KEY
        return PayloadShape.NO_ROWS
    if _is_row_array(raw):
        return PayloadShape.BARE_LIST
    return PayloadShape.INVALID


def classify_columns(columns: Any) -> ColumnsShape:
    if not columns:
        return ColumnsShape.ABSENT
    if isinstance(columns, Mapping):
        return ColumnsShape.MAPPING
    if isinstance(columns, Sequence) and not isinstance(columns, (str, bytes)):
        if any(isinstance(c, Mapping) for c in columns):
            return ColumnsShape.DESCRIPTORS
        return ColumnsShape.NAMES
    return ColumnsShape.ABSENT


def extract_rows(raw: Any, shape: PayloadShape) -> list[Any]:
    if shape is PayloadShape.ROWS_KEY:
        return list(raw["rows"])
    if shape is PayloadShape.DATA_KEY:
        return list(raw["data"])
    if shape is PayloadShape.BARE_LIST:
        return list(raw)
    return []


def _descriptor_name(col: Any) -> str:
    if isinstance(col, Mapping):
        for key in ("name", "key", "label"):
            if col.get(key):
                return str(col[key])
        return ""
    if col is None:
        return ""
    return str(col)


def extract_column_names(columns: Any, unique: bool = True) -> list[str]:
    """Column names from any accepted ColumnsShape.

    With ``unique`` (the default) empty names are dropped and duplicates are
    kept once, in first-seen order. With ``unique=False`` every position is
    kept, empty names included, which is what positional rows zip against.
    """
    shape = classify_columns(columns)
    if shape is ColumnsShape.ABSENT:
        return []
    if shape is ColumnsShape.MAPPING:
        names = [str(k) for k in columns.keys()]
    else:
        names = [_descriptor_name(c) for c in columns]
    if not unique:
        return names
    return list(dict.fromkeys(n for n in names if n))


def rows_are_arrays(rows: list[Any]) -> bool:
    """Rows are positional arrays (judged on the first row)."""
    return bool(rows) and _is_row_array(rows[0])


def zip_array_rows(rows: list[Any], column_names: list[str]) -> list[Any]:
    """Turn positional rows into dicts; missing or empty names become ``col_<i>``.

    Non-array rows are left untouched so the row-level checks can report them.
    """
    out: list[Any] = []
    for row in rows:
        if not _is_row_array(row):
            out.append(row)
            continue
        obj: dict[str, Any] = {}
        for i, val in enumerate(row):
            name = column_names[i] if i < len(column_names) and column_names[i] else f"col_{i}"
            obj[name] = val
        out.append(obj)
    return out
