from __future__ import annotations

from app.pipeline.sql.normalizer import build_result_set, column_names, normalize_rows


def test_round_trip_preserves_order():
    records = normalize_rows(["A", "B"], [[1, 2], [3, 4]])

    assert records == [{"A": 1, "B": 2}, {"A": 3, "B": 4}]
    assert [list(r) for r in records] == [["A", "B"], ["A", "B"]]


def test_column_names_from_wire_metadata():
    assert column_names([{"name": "ID", "type": "fixed"}, {"name": "AMOUNT"}]) == ["ID", "AMOUNT"]
    assert column_names(["ID", "AMOUNT"]) == ["ID", "AMOUNT"]
    assert column_names(None) == []


def test_column_names_are_unique_and_never_blank():
    assert column_names([{"name": "AMOUNT"}, {"name": "AMOUNT"}, {"name": ""}]) == ["AMOUNT", "AMOUNT_2", "COLUMN_3"]


def test_ragged_rows_zip_to_shorter():
    records = normalize_rows(["A", "B"], [[1], [2, 3, 4], None])
    assert records == [{"A": 1}, {"A": 2, "B": 3}, {}]


def test_empty_rows():
    assert normalize_rows(["A"], None) == []
    assert normalize_rows(["A"], []) == []


def test_build_result_set():
    result = build_result_set([{"name": "N"}], [["5"], ["6"]], total_rows=250)

    assert result.columns == ["N"]
    assert result.records == [{"N": "5"}, {"N": "6"}]
    assert result.row_count == 2
    assert result.total_rows == 250
    assert not result.is_empty
