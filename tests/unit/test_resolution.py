from __future__ import annotations

from pathlib import Path

import pytest

from service_insights.errors import ConfirmRejected, EditRejected, ParseError, StaleIssueError
from service_insights.models.config_models import InsightsConfig
from service_insights.services.resolution import ResolutionSession, coerce_edit_value
from service_insights.services.validator import REASON_DATE
from service_insights.storage.store import DatasetStore, JsonFileStore


@pytest.fixture()
def example_session(example_csv_text: str, short_config: InsightsConfig) -> ResolutionSession:
    session = ResolutionSession(short_config)
    session.load_text(example_csv_text)
    return session


def _issue(session: ResolutionSession, rule: str):
    return next(i for i in session.issues if i.rule == rule)


def test_coerce_edit_value():
    assert coerce_edit_value("engagement", " YES ") == "yes"
    assert coerce_edit_value("score", "8") == 8
    assert isinstance(coerce_edit_value("score", "8"), int)
    assert coerce_edit_value("cost", " 49.5 ") == 49.5
    assert coerce_edit_value("date", "01/15/24") == "01/15/24"
    assert coerce_edit_value("category", " Tune-up ") == " Tune-up "


@pytest.mark.parametrize("raw", ["abc", "", "1_0", "nan"])
def test_coerce_edit_value_rejects_non_numbers(raw):
    with pytest.raises(EditRejected):
        coerce_edit_value("cost", raw)


def test_edit_resolves_issue_and_revalidates(example_session: ResolutionSession):
    assert len(example_session.issues) == 4
    example_session.edit(_issue(example_session, "score"), "8")

    assert example_session.dataset.rows[1]["score"] == 8
    assert [i.rule for i in example_session.issues] == ["cost", "date", "category"]


def test_edit_with_still_invalid_value_keeps_issue(example_session: ResolutionSession):
    example_session.edit(_issue(example_session, "date"), "02/30/2024")
    date = _issue(example_session, "date")
    assert date.value == "02/30/2024"
    assert date.reason == REASON_DATE


def test_edit_rejected_leaves_dataset_untouched(example_session: ResolutionSession):
    before = example_session.dataset.to_records()
    with pytest.raises(EditRejected):
        example_session.edit(_issue(example_session, "cost"), "lots")
    assert example_session.dataset.to_records() == before
    assert len(example_session.issues) == 4


def test_edit_never_touches_other_cells(example_session: ResolutionSession):
    before = dict(example_session.dataset.rows[1])
    example_session.edit(_issue(example_session, "category"), "Oil Change")
    after = example_session.dataset.rows[1]
    assert after["category"] == "Oil Change"
    assert {k: v for k, v in after.items() if k != "category"} == {
        k: v for k, v in before.items() if k != "category"
    }


def test_delete_removes_row_and_its_issues(example_session: ResolutionSession):
    example_session.delete(_issue(example_session, "cost"))
    assert len(example_session.dataset) == 1
    assert example_session.issues == []
    assert example_session.complete


def test_delete_shifts_later_row_indexes(short_config: InsightsConfig):
    session = ResolutionSession(short_config)
    session.load_text(
        "engagement,score,cost,date,category\n"
        "maybe,9,50,01/15/24,A\n"
        "Yes,9,50,01/15/24,A\n"
        "Yes,99,50,01/15/24,A\n"
    )
    assert [(i.row_index, i.rule) for i in session.issues] == [(0, "engagement"), (2, "score")]
    score_row_id = _issue(session, "score").row_id

    session.delete(_issue(session, "engagement"))

    assert [(i.row_index, i.rule) for i in session.issues] == [(1, "score")]
    assert session.issues[0].row_id == score_row_id


def test_confirm_removes_only_that_issue(example_session: ResolutionSession):
    cost = _issue(example_session, "cost")
    remaining = example_session.confirm(cost)

    assert [i.rule for i in remaining] == ["score", "date", "category"]
    assert cost.exception_key() in example_session.confirmed
    # a full pass agrees with the confirm shortcut
    assert example_session.revalidate().issues == tuple(remaining)


def test_confirm_survives_unrelated_edits(example_session: ResolutionSession):
    example_session.confirm(_issue(example_session, "cost"))
    example_session.edit(_issue(example_session, "score"), "9")
    assert "cost" not in [i.rule for i in example_session.issues]


def test_confirmations_reset_on_new_load(short_config: InsightsConfig):
    session = ResolutionSession(short_config)
    session.load_text("engagement,score,cost,date,category\nYes,9,-10,01/15/24,A\n")
    session.confirm(session.issues[0])
    assert session.complete

    session.load_text("engagement,score,cost,date,category\nYes,9,-10,01/15/24,A\n")
    assert len(session.issues) == 1
    assert not session.confirmed


def test_confirm_rejected_for_hard_rule(example_session: ResolutionSession):
    with pytest.raises(ConfirmRejected):
        example_session.confirm(_issue(example_session, "date"))
    assert len(example_session.issues) == 4
    assert not example_session.confirmed


def test_stale_issue_is_rejected(example_session: ResolutionSession):
    stale = _issue(example_session, "score")
    example_session.edit(stale, "5")
    with pytest.raises(StaleIssueError):
        example_session.delete(stale)
    with pytest.raises(StaleIssueError):
        example_session.edit(stale, "6")
    assert len(example_session.dataset) == 2


def test_actions_without_dataset_are_stale(example_session: ResolutionSession):
    issue = example_session.issues[0]
    example_session.clear()
    with pytest.raises(StaleIssueError):
        example_session.confirm(issue)


def test_parse_error_keeps_prior_dataset(example_session: ResolutionSession):
    before = example_session.dataset
    with pytest.raises(ParseError):
        example_session.load_text("header_only\n")
    assert example_session.dataset is before
    assert len(example_session.issues) == 4


def test_loading_replaces_dataset(example_session: ResolutionSession, clean_csv_text: str):
    example_session.load_text(clean_csv_text)
    # clean rows use the default column names, not the short ones
    assert len(example_session.dataset) == 5
    assert example_session.dataset.headers[0] == "digital_engagement"


def test_mutations_are_saved(temp_workdir: Path, example_csv_text: str, short_config: InsightsConfig):
    store = DatasetStore(JsonFileStore(temp_workdir / "store"))
    session = ResolutionSession(short_config, store)
    session.load_text(example_csv_text)
    session.edit(_issue(session, "score"), "7")

    restored = ResolutionSession(short_config, store)
    assert restored.restore()
    assert restored.dataset.rows == session.dataset.rows
    assert [i.rule for i in restored.issues] == ["cost", "date", "category"]

    session.delete(_issue(session, "cost"))
    assert len(store.load()) == 1


def test_restore_without_store_or_data(temp_workdir: Path):
    assert ResolutionSession().restore() is False
    session = ResolutionSession(store=DatasetStore(JsonFileStore(temp_workdir / "empty")))
    assert session.restore() is False
    assert not session.complete


def test_load_file(write_csv, clean_csv_text: str):
    session = ResolutionSession()
    result = session.load_file(write_csv(clean_csv_text))
    assert result.complete
    assert session.complete


def test_confirmed_cell_changed_to_other_bad_value_is_flagged_again(example_session: ResolutionSession):
    cost = _issue(example_session, "cost")
    example_session.edit(cost, "-20")
    again = _issue(example_session, "cost")
    assert again.value == -20
    assert isinstance(again.value, int)

    example_session.edit(again, "-10.0")
    edited = _issue(example_session, "cost")
    assert edited.value == -10.0
    example_session.confirm(edited)
    assert "cost" not in [i.rule for i in example_session.issues]

    # a confirmed cell has no current issue to act on
    with pytest.raises(StaleIssueError):
        example_session.edit(edited, "-30")
    assert example_session.dataset.rows[1]["cost"] == -10.0

    example_session.dataset.set_cell(edited.row_index, edited.column, -20)
    example_session.revalidate()
    assert _issue(example_session, "cost").value == -20

    # int -10 equals the confirmed float -10.0
    example_session.dataset.set_cell(edited.row_index, edited.column, -10)
    example_session.revalidate()
    assert "cost" not in [i.rule for i in example_session.issues]


def test_confirmation_follows_row_after_earlier_delete(short_config: InsightsConfig):
    session = ResolutionSession(short_config)
    session.load_text(
        "engagement,score,cost,date,category\n"
        "Yes,9,50,01/15/24,\n"
        "Yes,9,-10,01/15/24,Wash\n"
        "Yes,9,-5,01/15/24,Wash\n"
    )
    costs = [i for i in session.issues if i.rule == "cost"]
    assert [(i.row_index, i.value) for i in costs] == [(1, -10), (2, -5)]
    session.confirm(costs[0])

    session.delete(_issue(session, "category"))

    remaining = [i for i in session.issues if i.rule == "cost"]
    assert [(i.row_index, i.value) for i in remaining] == [(1, -5)]
    assert session.dataset.rows[0]["cost"] == -10
