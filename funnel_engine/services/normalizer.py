from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any

from ..config.loader import DEFAULT_CONFIG, EngineConfig
from ..models.column import ColumnDescriptor, ColumnStats, ColumnType, PercentScale
from ..models.dataset import NormalizedDataset, NormalizedRow
from ..models.warning import (
    ARRAY_ROWS,
    INFERRED_COLUMNS,
    INVALID_DATE,
    INVALID_INPUT,
    INVALID_NUMBER,
    INVALID_ROW,
    NO_ROWS,
    NORMALIZATION_ERROR,
    OUT_OF_RANGE_PERCENT,
    NormalizationWarning,
)
from ..parsing.payload import (
    PayloadShape,
    classify_payload,
    extract_column_names,
    extract_rows,
    rows_are_arrays,
    zip_array_rows,
)
from ..parsing.scalars import detect_percent_scale, parse_date, parse_number, parse_percent
from .detector import detect_column_type

"""Dataset normalization service.

Turns a raw, loosely typed payload into a NormalizedDataset:

1. classify the payload shape (INVALID_INPUT / NO_ROWS end the call)
2. zip positional rows against the full column list, position by position
   (ARRAY_ROWS); a repeated name keeps its last value
3. resolve column names, inferring them from the first row if needed
   (INFERRED_COLUMNS)
4. type every column: declared spec columns win, otherwise detection over
   the first ``type_sample_size`` rows (+ percent scale detection)
5. convert every cell; bad cells become None plus a warning, bad rows become
   an all-None row plus INVALID_ROW (rows are never dropped)
6. compute ColumnStats for number / currency / percent columns
7. sort rows by the first date column, None dates last (stable)

normalize_dataset never raises. Anything unexpected ends up as a single
NORMALIZATION_ERROR warning on an empty dataset.
"""

__all__ = [
    "normalize_dataset",
]

logger = logging.getLogger(__name__)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _spec_attr(entry: Any, name: str) -> Any:
    if isinstance(entry, Mapping):
        return entry.get(name)
    return getattr(entry, name, None)


def _index_spec_columns(spec_columns: Iterable[Any] | None) -> dict[str, Any]:
    """name -> declared column (first declaration wins)."""
    index: dict[str, Any] = {}
    for entry in spec_columns or ():
        name = _spec_attr(entry, "name")
        if name and str(name) not in index:
            index[str(name)] = entry
    return index


def _describe_column(
    name: str, rows: list[Any], declared: Any, cfg: EngineConfig
) -> ColumnDescriptor:
    if declared is not None:
        # explicit config always wins over inference
        return ColumnDescriptor(
            name=name,
            type=ColumnType.coerce(_spec_attr(declared, "type")),
            scale=PercentScale.coerce(_spec_attr(declared, "scale")),
        )

    samples = [row.get(name) if isinstance(row, Mapping) else None for row in rows[: cfg.type_sample_size]]
    col_type = detect_column_type(name, samples)
    scale = None
    if col_type == ColumnType.PERCENT:
        numbers = [n for n in (parse_number(v) for v in samples) if n is not None]
        scale = detect_percent_scale(numbers, threshold=cfg.percent_scale_threshold)
    return ColumnDescriptor(name=name, type=col_type, scale=scale)


def _convert_cell(
    raw: Any,
    col: ColumnDescriptor,
    row_index: int,
    warnings: list[NormalizationWarning],
    cfg: EngineConfig,
) -> Any:
    if col.type == ColumnType.DATE:
        parsed = parse_date(raw, ms_threshold=cfg.timestamp_ms_threshold)
        if raw and parsed is None:
            warnings.append(NormalizationWarning(
                INVALID_DATE, f"Invalid date value at row {row_index}", column=col.name, row=row_index,
            ))
        return parsed

    if col.type in (ColumnType.NUMBER, ColumnType.CURRENCY):
        parsed = parse_number(raw)
        if raw is not None and raw != "" and parsed is None:
            warnings.append(NormalizationWarning(
                INVALID_NUMBER, f"Invalid number value at row {row_index}", column=col.name, row=row_index,
            ))
        return parsed

    if col.type == ColumnType.PERCENT:
        parsed = parse_percent(raw, col.scale or PercentScale.UNIT)
        if parsed is not None and not 0 <= parsed <= 1:
            warnings.append(NormalizationWarning(
                OUT_OF_RANGE_PERCENT, f"Percent value out of 0-1 range at row {row_index}",
                column=col.name, row=row_index,
            ))
        return parsed

    if col.type == ColumnType.BOOLEAN:
        if isinstance(raw, bool):
            return raw
        if raw in ("true", "1", 1):
            return True
        if raw in ("false", "0", 0):
            return False
        return None

    # string / unknown: kept as-is
    return raw


def _column_stats(name: str, rows: list[NormalizedRow]) -> ColumnStats:
    values = [r[name] for r in rows if _is_number(r[name])]
    nulls = sum(1 for r in rows if r[name] is None)
    if not values:
        return ColumnStats(nulls=nulls)
    return ColumnStats(min=min(values), max=max(values), avg=sum(values) / len(values), nulls=nulls)


def _date_sort_key(value: datetime | None) -> tuple[bool, datetime]:
    # None sorts last; equal keys keep input order (list.sort is stable)
    return (value is None, value if value is not None else datetime.min)


def _normalize(
    raw_input: Any,
    spec_columns: Iterable[Any] | None,
    cfg: EngineConfig,
    warnings: list[NormalizationWarning],
) -> NormalizedDataset:
    shape = classify_payload(raw_input)
    if shape is PayloadShape.INVALID:
        warnings.append(NormalizationWarning(INVALID_INPUT, "Input is not an object"))
        return NormalizedDataset.empty(warnings)
    if shape is PayloadShape.NO_ROWS:
        warnings.append(NormalizationWarning(NO_ROWS, "Could not find rows array"))
        return NormalizedDataset.empty(warnings)

    envelope: Mapping[str, Any] = raw_input if isinstance(raw_input, Mapping) else {}
    declared_columns = envelope.get("columns")
    rows = extract_rows(raw_input, shape)

    if rows_are_arrays(rows):
        warnings.append(NormalizationWarning(ARRAY_ROWS, "Rows are arrays, converting to objects"))
        rows = zip_array_rows(rows, extract_column_names(declared_columns, unique=False))

    names = extract_column_names(declared_columns)
    if not names and rows:
        warnings.append(NormalizationWarning(INFERRED_COLUMNS, "Columns inferred from first row"))
        if isinstance(rows[0], Mapping):
            names = [str(k) for k in rows[0].keys()]

    declared = _index_spec_columns(spec_columns)
    columns = [_describe_column(name, rows, declared.get(name), cfg) for name in names]

    normalized_rows: list[NormalizedRow] = []
    for index, row in enumerate(rows):
        if not isinstance(row, Mapping):
            warnings.append(NormalizationWarning(INVALID_ROW, f"Row {index} is not an object", row=index))
            normalized_rows.append({c.name: None for c in columns})
            continue
        out: NormalizedRow = {}
        for col in columns:
            out[col.name] = _convert_cell(row.get(col.name), col, index, warnings, cfg)
        normalized_rows.append(out)

    stats = {c.name: _column_stats(c.name, normalized_rows) for c in columns if c.is_numeric}

    date_col = next((c.name for c in columns if c.type == ColumnType.DATE), None)
    if date_col is not None:
        normalized_rows.sort(key=lambda r: _date_sort_key(r[date_col]))

    return NormalizedDataset(
        columns=columns,
        rows=normalized_rows,
        warnings=list(warnings),
        stats=stats,
        meta=envelope.get("meta"),
    )


def normalize_dataset(
    raw_input: Any,
    spec_columns: Iterable[Any] | None = None,
    config: EngineConfig | None = None,
) -> NormalizedDataset:
    """Normalize a raw backend payload. Never raises.

    Args:
        raw_input: rows as a list, or an object wrapping ``rows`` / ``data``
            (optionally with ``columns`` and ``meta``)
        spec_columns: declared columns (SpecColumn, ColumnDescriptor or
            mappings with name/type/scale) overriding type inference by name
        config: heuristic thresholds; DEFAULT_CONFIG when omitted

    Returns:
        NormalizedDataset; failures are reported through ``warnings``
    """
    cfg = config or DEFAULT_CONFIG
    warnings: list[NormalizationWarning] = []
    try:
        dataset = _normalize(raw_input, spec_columns, cfg, warnings)
    except Exception as e:
        logger.warning(f"dataset normalization failed: {e}")
        warnings.append(NormalizationWarning(NORMALIZATION_ERROR, f"Error during normalization: {e}"))
        return NormalizedDataset.empty(warnings)

    logger.debug(
        f"normalized rows={len(dataset.rows)} columns={len(dataset.columns)} warnings={len(dataset.warnings)}"
    )
    return dataset
