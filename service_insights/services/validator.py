from __future__ import annotations

import logging
import re
import statistics
from collections import Counter
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

from ..ingest.coercion import FALSE_WORDS, TRUE_WORDS, cell_text, to_number
from ..models.config_models import InsightsConfig
from ..models.dataset import Dataset, Record
from ..models.issue import ConfirmedException, Issue

"""Rule-based validation engine.

The rule set is data: ``RULES`` maps each logical field to a check function,
in evaluation order (engagement, score, cost, date, category). A pass reads
the dataset and the confirmation set and returns every issue, row-ascending
and in rule order within a row. Passes are pure: the same inputs give an
equal issue list.
"""

__all__ = [
    "Finding",
    "RuleContext",
    "ColumnRule",
    "RULES",
    "ValidationResult",
    "REASON_ENGAGEMENT",
    "REASON_SCORE",
    "REASON_COST_NAN",
    "REASON_COST_NEGATIVE",
    "REASON_DATE",
    "REASON_CATEGORY",
    "mean_valid_cost",
    "is_valid_service_date",
    "validate_row",
    "validate_dataset",
    "issues_by_column",
    "filter_issues",
]

logger = logging.getLogger(__name__)

REASON_ENGAGEMENT = "Must be 'Yes' or 'No'"
REASON_SCORE = "Must be a number between 0-10"
REASON_COST_NAN = "Must be a valid number"
REASON_COST_NEGATIVE = "Cost is negative - confirm or correct"
REASON_DATE = "Must be a valid date (MM/DD/YY)"
REASON_CATEGORY = "Cannot be empty"

SCORE_MIN = 0.0
SCORE_MAX = 10.0

_DATE_RE = re.compile(r"([0-9]{1,2})/([0-9]{1,2})/([0-9]{1,2})")
_ENGAGEMENT_WORDS = TRUE_WORDS | FALSE_WORDS


@dataclass(frozen=True)
class Finding:
    reason: str
    confirmable: bool = False


@dataclass(frozen=True)
class RuleContext:
    """Per-pass inputs shared by every rule."""
    mean_cost: float
    outlier_margin: float
    confirmed: frozenset[ConfirmedException]

    def is_confirmed(self, row_id: int, column: str, value: Any) -> bool:
        return ConfirmedException(row_id=row_id, column=column, value=value) in self.confirmed


RuleCheck = Callable[[Any, str, int, RuleContext], Finding | None]


@dataclass(frozen=True)
class ColumnRule:
    field: str
    check: RuleCheck


def check_engagement(value: Any, column: str, row_id: int, ctx: RuleContext) -> Finding | None:
    if cell_text(value).lower() in _ENGAGEMENT_WORDS:
        return None
    return Finding(REASON_ENGAGEMENT)


def check_score(value: Any, column: str, row_id: int, ctx: RuleContext) -> Finding | None:
    score = to_number(value)
    if score is None or score < SCORE_MIN or score > SCORE_MAX:
        return Finding(REASON_SCORE)
    return None


def check_cost(value: Any, column: str, row_id: int, ctx: RuleContext) -> Finding | None:
    """At most one cost finding per row: not a number, negative, or outlier."""
    cost = to_number(value)
    if cost is None:
        return Finding(REASON_COST_NAN)
    if ctx.is_confirmed(row_id, column, value):
        return None
    if cost < 0:
        return Finding(REASON_COST_NEGATIVE, confirmable=True)
    # no outlier rule until at least one positive cost sets a mean
    if ctx.mean_cost > 0 and cost > ctx.mean_cost + ctx.outlier_margin:
        return Finding(
            f"${cost:.2f} is more than ${ctx.outlier_margin:g} above average (${ctx.mean_cost:.2f})",
            confirmable=True,
        )
    return None


def is_valid_service_date(value: Any) -> bool:
    """Literal M/D/Y with 1-2 digits each; month 1-12, day 1-31.

    No per-month day limit is applied.
    """
    m = _DATE_RE.fullmatch(cell_text(value))
    if m is None:
        return False
    month, day = int(m.group(1)), int(m.group(2))
    return 1 <= month <= 12 and 1 <= day <= 31


def check_date(value: Any, column: str, row_id: int, ctx: RuleContext) -> Finding | None:
    return None if is_valid_service_date(value) else Finding(REASON_DATE)


def check_category(value: Any, column: str, row_id: int, ctx: RuleContext) -> Finding | None:
    return None if cell_text(value).strip() else Finding(REASON_CATEGORY)


RULES: tuple[ColumnRule, ...] = (
    ColumnRule("engagement", check_engagement),
    ColumnRule("score", check_score),
    ColumnRule("cost", check_cost),
    ColumnRule("date", check_date),
    ColumnRule("category", check_category),
)


@dataclass(frozen=True)
class ValidationResult:
    issues: tuple[Issue, ...]
    mean_cost: float

    @property
    def complete(self) -> bool:
        """True when the pass produced no issues."""
        return not self.issues

    def __len__(self) -> int:
        return len(self.issues)


def mean_valid_cost(dataset: Dataset, column: str) -> float:
    """Mean over costs that are non-negative numbers; 0.0 when there are none."""
    costs = [c for c in (to_number(v) for v in dataset.column_values(column)) if c is not None and c >= 0]
    return statistics.fmean(costs) if costs else 0.0


def validate_row(
    row: Record,
    row_index: int,
    row_id: int,
    ctx: RuleContext,
    config: InsightsConfig,
) -> list[Issue]:
    issues: list[Issue] = []
    for rule in RULES:
        column = config.columns.column_for(rule.field)
        value = row.get(column)
        finding = rule.check(value, column, row_id, ctx)
        if finding is None:
            continue
        issues.append(
            Issue(
                row_index=row_index,
                row_id=row_id,
                column=column,
                rule=rule.field,
                value=value,
                reason=finding.reason,
                row=dict(row),
                confirmable=finding.confirmable,
            )
        )
    return issues


def validate_dataset(
    dataset: Dataset,
    confirmed: Iterable[ConfirmedException] = (),
    config: InsightsConfig | None = None,
) -> ValidationResult:
    """Run one full validation pass."""
    cfg = config or InsightsConfig()
    ctx = RuleContext(
        mean_cost=mean_valid_cost(dataset, cfg.columns.cost),
        outlier_margin=cfg.validation.cost_outlier_margin,
        confirmed=frozenset(confirmed),
    )
    issues: list[Issue] = []
    for index, row in enumerate(dataset.rows):
        issues.extend(validate_row(row, index, dataset.row_id(index), ctx, cfg))

    result = ValidationResult(issues=tuple(issues), mean_cost=ctx.mean_cost)
    if result.complete:
        logger.info(f"validation complete rows={len(dataset)}")
    else:
        logger.debug(f"validation pass rows={len(dataset)} issues={len(issues)} mean_cost={ctx.mean_cost:.2f}")
    return result


def issues_by_column(issues: Iterable[Issue]) -> dict[str, int]:
    """Issue count per column, in first-seen order."""
    return dict(Counter(i.column for i in issues))


def filter_issues(issues: Iterable[Issue], columns: Iterable[str] | None = None) -> list[Issue]:
    """Keep issues whose column is in ``columns``; no filter keeps everything."""
    wanted = set(columns or ())
    if not wanted:
        return list(issues)
    return [i for i in issues if i.column in wanted]
