from __future__ import annotations

import logging
import math
import re
from collections.abc import Iterable
from typing import Any

import pandas as pd

from ..ingest.coercion import FALSE_WORDS, TRUE_WORDS, cell_text, to_number
from ..models.analytics import (
    CategoryBreakdown,
    CategorySegment,
    CategoryStats,
    CostStats,
    DatasetSummary,
    EngagementSplit,
    MonthlyCounts,
    SatisfactionScore,
    SegmentComparison,
)
from ..models.config_models import InsightsConfig, VariabilitySettings
from ..models.dataset import Dataset

"""Aggregation library.

Pure functions over a Dataset. Nothing here mutates state or raises on dirty
data: unparseable or missing values are left out of the aggregate they would
feed, and empty input gives the zero form of each result.

Rounding is half-up (2.5 -> 3, -12.5 -> -12) for scores and percentages.
"""

__all__ = [
    "MONTH_NAMES",
    "round_half_up",
    "satisfaction_score",
    "cost_stats",
    "classify_variability",
    "engagement_split",
    "segment_comparison",
    "category_breakdown",
    "category_segments",
    "monthly_category_counts",
    "month_name",
    "summarize",
]

logger = logging.getLogger(__name__)

MONTH_NAMES = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)

_LEADING_INT_RE = re.compile(r"\s*([0-9]+)")


def round_half_up(value: float, digits: int = 0) -> float:
    scale = 10 ** digits
    return math.floor(value * scale + 0.5) / scale


def _numbers(values: Iterable[Any]) -> pd.Series:
    """Numeric view of raw cells; non-numbers become NaN and are dropped."""
    series = pd.Series(list(values), dtype=object)
    return series.map(to_number).astype(float).dropna()


def _column(frame: pd.DataFrame, name: str) -> pd.Series:
    if name in frame.columns:
        return frame[name]
    return pd.Series([None] * len(frame), index=frame.index, dtype=object)


def _category_keys(frame: pd.DataFrame, column: str) -> pd.Series:
    return _column(frame, column).map(lambda v: cell_text(v).strip())


def satisfaction_score(scores: Iterable[Any]) -> SatisfactionScore:
    """Satisfaction (NPS) over ratings in [0, 10]; other values are ignored."""
    ratings = _numbers(scores)
    ratings = ratings[(ratings >= 0) & (ratings <= 10)]
    total = len(ratings)
    if total == 0:
        return SatisfactionScore()
    detractors = int((ratings <= 6).sum())
    passives = int(ratings.isin([7, 8]).sum())
    promoters = int((ratings >= 9).sum())
    raw = (promoters / total - detractors / total) * 100
    return SatisfactionScore(
        score=int(round_half_up(raw)),
        average_rating=round_half_up(float(ratings.mean()), 1),
        detractors=detractors,
        passives=passives,
        promoters=promoters,
        total=total,
        raw_score=raw,
    )


def classify_variability(cv: float, settings: VariabilitySettings | None = None) -> str:
    s = settings or VariabilitySettings()
    if cv > s.high_cv:
        return "High"
    if cv > s.medium_cv:
        return "Medium"
    return "Low"


def cost_stats(costs: Iterable[Any], settings: VariabilitySettings | None = None) -> CostStats:
    """Price statistics over non-negative numeric costs (population variance)."""
    values = _numbers(costs)
    values = values[values >= 0]
    if values.empty:
        return CostStats()
    mean = float(values.mean())
    variance = float(values.var(ddof=0))
    std_dev = math.sqrt(variance)
    cv = (std_dev / mean) * 100 if mean and std_dev else 0.0
    return CostStats(
        count=len(values),
        minimum=float(values.min()),
        maximum=float(values.max()),
        mean=mean,
        variance=variance,
        std_dev=std_dev,
        cv=cv,
        variability=classify_variability(cv, settings),
    )


def _segment_masks(frame: pd.DataFrame, column: str) -> tuple[pd.Series, pd.Series]:
    text = _column(frame, column).map(lambda v: cell_text(v).strip().lower())
    return text.isin(TRUE_WORDS), text.isin(FALSE_WORDS)


def engagement_split(dataset: Dataset, config: InsightsConfig | None = None) -> EngagementSplit:
    cfg = config or InsightsConfig()
    engaged, non_engaged = _segment_masks(dataset.to_frame(), cfg.columns.engagement)
    n_engaged, n_non = int(engaged.sum()), int(non_engaged.sum())
    total = n_engaged + n_non
    pct = int(round_half_up(n_engaged / total * 100)) if total else 0
    return EngagementSplit(engaged=n_engaged, non_engaged=n_non, total=total, engaged_percentage=pct)


def _compare(frame: pd.DataFrame, cfg: InsightsConfig) -> SegmentComparison:
    engaged, non_engaged = _segment_masks(frame, cfg.columns.engagement)
    scores = _column(frame, cfg.columns.score)
    eng = satisfaction_score(scores[engaged])
    non = satisfaction_score(scores[non_engaged])
    return SegmentComparison(
        engaged=eng,
        non_engaged=non,
        difference=int(round_half_up(eng.raw_score - non.raw_score)),
    )


def segment_comparison(dataset: Dataset, config: InsightsConfig | None = None) -> SegmentComparison:
    """Satisfaction for engaged vs non-engaged rows and their difference."""
    return _compare(dataset.to_frame(), config or InsightsConfig())


def _pick(stats: list[CategoryStats], key) -> tuple[str, str]:
    """(highest, lowest) by ``key``; among ties highest is the first seen and lowest the last seen."""
    if not stats:
        return "", ""
    ordered = sorted(stats, key=lambda s: -key(s))
    return ordered[0].category, ordered[-1].category


def category_breakdown(dataset: Dataset, config: InsightsConfig | None = None) -> CategoryBreakdown:
    """Per service category: satisfaction, cost statistics and extremes.

    Blank categories are left out.
    """
    cfg = config or InsightsConfig()
    frame = dataset.to_frame()
    if frame.empty:
        return CategoryBreakdown()
    keys = _category_keys(frame, cfg.columns.category)
    scores = _column(frame, cfg.columns.score)
    costs = _column(frame, cfg.columns.cost)

    stats: list[CategoryStats] = []
    for category, group in frame.groupby(keys, sort=False):
        if not category:
            continue
        stats.append(
            CategoryStats(
                category=category,
                rows=len(group),
                satisfaction=satisfaction_score(scores.loc[group.index]),
                cost=cost_stats(costs.loc[group.index], cfg.variability),
            )
        )

    priced = [s for s in stats if s.cost.count > 0]
    rated = [s for s in stats if s.satisfaction.total > 0]
    highest_cv, lowest_cv = _pick(priced, lambda s: s.cost.cv)
    highest_rating, lowest_rating = _pick(rated, lambda s: s.satisfaction.average_rating)
    highest_cost, lowest_cost = _pick(priced, lambda s: s.cost.mean)
    return CategoryBreakdown(
        categories=tuple(stats),
        highest_cv=highest_cv,
        lowest_cv=lowest_cv,
        highest_rating=highest_rating,
        lowest_rating=lowest_rating,
        highest_cost=highest_cost,
        lowest_cost=lowest_cost,
        overall_mean_cost=cost_stats(costs, cfg.variability).mean,
    )


def category_segments(dataset: Dataset, config: InsightsConfig | None = None) -> list[CategorySegment]:
    """Engaged vs non-engaged satisfaction within each category."""
    cfg = config or InsightsConfig()
    frame = dataset.to_frame()
    if frame.empty:
        return []
    keys = _category_keys(frame, cfg.columns.category)
    result: list[CategorySegment] = []
    for category, group in frame.groupby(keys, sort=False):
        if not category:
            continue
        cmp = _compare(group, cfg)
        diff = cmp.engaged.score - cmp.non_engaged.score
        if diff > 0:
            leader = "Digital"
        elif diff < 0:
            leader = "Non-Digital"
        else:
            leader = "Equal"
        result.append(
            CategorySegment(
                category=category,
                engaged_score=cmp.engaged.score,
                non_engaged_score=cmp.non_engaged.score,
                difference=diff,
                leader=leader,
            )
        )
    return result


def _leading_month(value: Any) -> int | None:
    m = _LEADING_INT_RE.match(cell_text(value))
    return int(m.group(1)) if m else None


def monthly_category_counts(dataset: Dataset, config: InsightsConfig | None = None) -> MonthlyCounts:
    """Row counts per (category, month) from the leading numeral of the date.

    Dates are assumed valid; rows without a leading numeral or category are skipped.
    """
    cfg = config or InsightsConfig()
    frame = dataset.to_frame()
    if frame.empty:
        return MonthlyCounts()
    pairs = pd.DataFrame(
        {
            "category": _category_keys(frame, cfg.columns.category),
            "month": _column(frame, cfg.columns.date).map(_leading_month),
        }
    )
    pairs = pairs[(pairs["category"] != "") & pairs["month"].notna()]
    if pairs.empty:
        return MonthlyCounts()
    pairs = pairs.assign(month=pairs["month"].astype(int))
    sizes = pairs.groupby(["category", "month"], sort=False).size()
    counts = {(str(cat), int(month)): int(n) for (cat, month), n in sizes.items()}
    return MonthlyCounts(
        months=tuple(sorted(pairs["month"].unique().tolist())),
        categories=tuple(pd.unique(pairs["category"]).tolist()),
        counts=counts,
    )


def month_name(month: int) -> str:
    return MONTH_NAMES[month - 1] if 1 <= month <= 12 else str(month)


def summarize(dataset: Dataset, config: InsightsConfig | None = None) -> DatasetSummary:
    cfg = config or InsightsConfig()
    summary = DatasetSummary(
        rows=len(dataset),
        satisfaction=satisfaction_score(dataset.column_values(cfg.columns.score)),
        engagement=engagement_split(dataset, cfg),
        segments=segment_comparison(dataset, cfg),
        breakdown=category_breakdown(dataset, cfg),
        category_segments=tuple(category_segments(dataset, cfg)),
        monthly=monthly_category_counts(dataset, cfg),
    )
    logger.debug(f"summary rows={summary.rows} nps={summary.satisfaction.score}")
    return summary
