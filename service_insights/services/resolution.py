from __future__ import annotations

import logging
from pathlib import Path

from ..errors import ConfirmRejected, EditRejected, StaleIssueError
from ..ingest.coercion import CellValue, to_number
from ..ingest.reader import parse_csv_text, read_csv_file
from ..models.config_models import InsightsConfig
from ..models.dataset import Dataset
from ..models.issue import ConfirmedException, Issue
from ..storage.store import DatasetStore
from .validator import ValidationResult, validate_dataset

"""Issue resolution session.

The session is the sole writer of the working dataset. Every edit or delete
saves the dataset and re-runs validation to completion before returning, so
the issue list a caller sees always matches the dataset. Confirm skips the
full pass: the confirmation is exactly the condition that suppresses the
confirmed issue, so removing it gives the same list a pass would.

Actions take an Issue from the current list; anything else raises
StaleIssueError without touching the dataset.
"""

__all__ = [
    "ResolutionSession",
    "coerce_edit_value",
]

logger = logging.getLogger(__name__)

NUMERIC_FIELDS = frozenset({"score", "cost"})


def coerce_edit_value(rule: str, raw: str) -> CellValue:
    """Parse operator input into the canonical type of the target field.

    engagement -> lowercased string, score/cost -> number, others -> raw string.

    Raises:
        EditRejected: numeric field and ``raw`` is not a number.
    """
    if rule == "engagement":
        return raw.strip().lower()
    if rule in NUMERIC_FIELDS:
        number = to_number(raw)
        if number is None:
            raise EditRejected(f"'{raw}' is not a valid number")
        try:
            return int(raw.strip())
        except ValueError:
            return number
    return raw


class ResolutionSession:
    """Owns the dataset, the confirmation set and the current issue list."""

    def __init__(self, config: InsightsConfig | None = None, store: DatasetStore | None = None) -> None:
        self.config = config or InsightsConfig()
        self.store = store
        self.dataset: Dataset | None = None
        self.confirmed: set[ConfirmedException] = set()
        self._issues: list[Issue] = []
        self._mean_cost = 0.0

    # -- state ---------------------------------------------------------

    @property
    def issues(self) -> list[Issue]:
        return list(self._issues)

    @property
    def complete(self) -> bool:
        """Validation complete: a dataset is loaded and no issue remains."""
        return self.dataset is not None and not self._issues

    @property
    def mean_cost(self) -> float:
        return self._mean_cost

    def revalidate(self) -> ValidationResult:
        if self.dataset is None:
            self._issues = []
            self._mean_cost = 0.0
            return ValidationResult(issues=(), mean_cost=0.0)
        result = validate_dataset(self.dataset, self.confirmed, self.config)
        self._issues = list(result.issues)
        self._mean_cost = result.mean_cost
        return result

    def _replace_dataset(self, dataset: Dataset) -> ValidationResult:
        self.dataset = dataset
        self.confirmed = set()
        self._save()
        return self.revalidate()

    def _save(self) -> None:
        if self.store is not None and self.dataset is not None:
            self.store.save(self.dataset)

    # -- loading -------------------------------------------------------

    def load_text(self, text: str) -> ValidationResult:
        """Parse and adopt a new dataset. ParseError leaves the prior one untouched."""
        dataset = parse_csv_text(text)
        logger.info(f"parsed rows={len(dataset)} columns={len(dataset.headers)}")
        return self._replace_dataset(dataset)

    def load_file(self, path: Path) -> ValidationResult:
        dataset = read_csv_file(path, self.config.max_file_bytes)
        logger.info(f"Successfully parsed {len(dataset)} rows from {path.name}")
        return self._replace_dataset(dataset)

    def restore(self) -> bool:
        """Load the stored dataset, if any. Returns True when one was found."""
        if self.store is None:
            return False
        dataset = self.store.load()
        if dataset is None:
            return False
        self.dataset = dataset
        self.confirmed = set()
        self.revalidate()
        logger.debug(f"restored rows={len(dataset)} issues={len(self._issues)}")
        return True

    def clear(self) -> None:
        if self.store is not None:
            self.store.clear()
        self.dataset = None
        self.confirmed = set()
        self._issues = []
        self._mean_cost = 0.0
        logger.info("cleared stored dataset")

    # -- actions -------------------------------------------------------

    def _require_current(self, issue: Issue) -> Dataset:
        if self.dataset is None or issue not in self._issues:
            raise StaleIssueError(
                f"issue at row {issue.display_row} column '{issue.column}' is not in the current issue list"
            )
        return self.dataset

    def edit(self, issue: Issue, new_value: str) -> ValidationResult:
        dataset = self._require_current(issue)
        value = coerce_edit_value(issue.rule, new_value)
        dataset.set_cell(issue.row_index, issue.column, value)
        logger.info(f"edit row={issue.display_row} column={issue.column} value={value!r}")
        self._save()
        return self.revalidate()

    def delete(self, issue: Issue) -> ValidationResult:
        dataset = self._require_current(issue)
        dataset.delete_row(issue.row_index)
        logger.info(f"delete row={issue.display_row} remaining={len(dataset)}")
        self._save()
        return self.revalidate()

    def confirm(self, issue: Issue) -> list[Issue]:
        self._require_current(issue)
        if not issue.confirmable:
            raise ConfirmRejected(f"'{issue.reason}' on column '{issue.column}' cannot be confirmed")
        self.confirmed.add(issue.exception_key())
        self._issues.remove(issue)
        logger.info(f"confirm row={issue.display_row} column={issue.column} value={issue.value!r}")
        if not self._issues:
            logger.info("validation complete")
        return self.issues
