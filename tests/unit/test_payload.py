from __future__ import annotations

from funnel_engine.parsing.payload import (
    ColumnsShape,
    PayloadShape,
    classify_columns,
    classify_payload,
    extract_column_names,
    extract_rows,
    rows_are_arrays,
    zip_array_rows,
)


def test_classify_payload_shapes():
    assert classify_payload({"rows": []}) is PayloadShape.ROWS_KEY
    assert classify_payload({"data": [{}]}) is PayloadShape.DATA_KEY
    assert classify_payload({"rows": "x", "data": []}) is PayloadShape.DATA_KEY
    assert classify_payload([{"a": 1}]) is PayloadShape.BARE_LIST
    assert classify_payload({"columns": ["a"]}) is PayloadShape.NO_ROWS
    assert classify_payload(None) is PayloadShape.INVALID
    assert classify_payload("rows") is PayloadShape.INVALID
    assert classify_payload(42) is PayloadShape.INVALID


def test_classify_columns_shapes():
    assert classify_columns(["a", "b"]) is ColumnsShape.NAMES
    assert classify_columns([{"name": "a"}, "b"]) is ColumnsShape.DESCRIPTORS
    assert classify_columns({"a": "number"}) is ColumnsShape.MAPPING
    assert classify_columns(None) is ColumnsShape.ABSENT
    assert classify_columns([]) is ColumnsShape.ABSENT
    assert classify_columns("abc") is ColumnsShape.ABSENT


def test_extract_rows_copies_the_list():
    raw = {"rows": [{"a": 1}]}
    rows = extract_rows(raw, PayloadShape.ROWS_KEY)
    rows.append({"a": 2})
    assert len(raw["rows"]) == 1
    assert extract_rows(raw, PayloadShape.NO_ROWS) == []


def test_extract_column_names_from_descriptors():
    columns = [{"name": "dia"}, {"key": "custo"}, {"label": "Leads"}, {"type": "number"}, "extra", None]
    assert extract_column_names(columns) == ["dia", "custo", "Leads", "extra"]


def test_extract_column_names_dedups_in_order():
    assert extract_column_names(["a", "b", "a", ""]) == ["a", "b"]
    assert extract_column_names({"x": 1, "y": 2}) == ["x", "y"]


def test_zip_array_rows_with_fallback_names():
    rows = [[1, 2, 3], {"a": 9}]
    assert rows_are_arrays(rows)
    assert zip_array_rows(rows, ["a", "b"]) == [{"a": 1, "b": 2, "col_2": 3}, {"a": 9}]
    assert not rows_are_arrays([{"a": 1}, [1]])
    assert not rows_are_arrays([])


def test_positional_names_keep_duplicates_and_gaps():
    assert extract_column_names(["a", "b", "a", ""], unique=False) == ["a", "b", "a", ""]


def test_zip_against_positional_names_keeps_alignment():
    names = extract_column_names(["canal", "canal", "", "leads_total"], unique=False)
    zipped = zip_array_rows([["x", "y", "z", "5"]], names)
    assert zipped == [{"canal": "y", "col_2": "z", "leads_total": "5"}]
