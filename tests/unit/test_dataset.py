from __future__ import annotations

import pytest

from service_insights.models.dataset import Dataset
from service_insights.models.issue import ConfirmedException, Issue


@pytest.fixture()
def ds() -> Dataset:
    return Dataset(
        headers=["category", "cost"],
        rows=[
            {"category": "A", "cost": 10},
            {"category": "B", "cost": 20},
            {"category": "C", "cost": 30},
        ],
    )


def test_row_ids_are_assigned_and_unique(ds: Dataset):
    assert len(ds.row_ids) == 3
    assert len(set(ds.row_ids)) == 3
    other = Dataset(headers=["x"], rows=[{"x": 1}])
    assert other.row_id(0) not in ds.row_ids


def test_row_ids_must_align():
    with pytest.raises(ValueError):
        Dataset(headers=["x"], rows=[{"x": 1}], row_ids=[1, 2])


def test_delete_row_keeps_ids_of_remaining_rows(ds: Dataset):
    last_id = ds.row_id(2)
    removed = ds.delete_row(0)
    assert removed == {"category": "A", "cost": 10}
    assert len(ds) == 2
    assert ds.row(1)["category"] == "C"
    assert ds.row_id(1) == last_id


def test_set_cell(ds: Dataset):
    ds.set_cell(1, "cost", 25.5)
    assert ds.row(1) == {"category": "B", "cost": 25.5}


def test_column_values_missing_column(ds: Dataset):
    assert ds.column_values("cost") == [10, 20, 30]
    assert ds.column_values("nope") == [None, None, None]


def test_copy_is_independent(ds: Dataset):
    clone = ds.copy()
    clone.set_cell(0, "cost", 99)
    assert ds.row(0)["cost"] == 10
    assert clone.row_ids == ds.row_ids


def test_from_records_fills_absent_columns():
    ds = Dataset.from_records(["a", "b"], [{"a": 1}, {"b": 2, "extra": 3}])
    assert ds.rows == [{"a": 1, "b": ""}, {"a": "", "b": 2}]


def test_to_frame(ds: Dataset):
    frame = ds.to_frame()
    assert list(frame.columns) == ["category", "cost"]
    assert frame["cost"].tolist() == [10, 20, 30]
    assert frame["cost"].dtype == object


def test_issue_helpers():
    issue = Issue(row_index=0, row_id=7, column="cost", rule="cost", value=-1, reason="neg", confirmable=True)
    assert issue.display_row == 1
    assert issue.exception_key() == ConfirmedException(row_id=7, column="cost", value=-1)
