from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any

"""Analytics result models.

Plain frozen dataclasses consumed read-only by reports and the CLI. Each
has a zero/empty form that aggregation returns for missing data.
"""

__all__ = [
    "SatisfactionScore",
    "EngagementSplit",
    "SegmentComparison",
    "CostStats",
    "CategoryStats",
    "CategoryBreakdown",
    "CategorySegment",
    "MonthlyCounts",
    "DatasetSummary",
]


@dataclass(frozen=True)
class SatisfactionScore:
    """NPS-style score over 0-10 ratings: detractors 0-6, passives 7-8, promoters 9-10."""
    score: int = 0  # (promoters% - detractors%) * 100, rounded
    average_rating: float = 0.0  # mean rating, 1 decimal
    detractors: int = 0
    passives: int = 0
    promoters: int = 0
    total: int = 0
    raw_score: float = 0.0  # unrounded, used for differences


@dataclass(frozen=True)
class EngagementSplit:
    engaged: int = 0
    non_engaged: int = 0
    total: int = 0
    engaged_percentage: int = 0


@dataclass(frozen=True)
class SegmentComparison:
    engaged: SatisfactionScore = field(default_factory=SatisfactionScore)
    non_engaged: SatisfactionScore = field(default_factory=SatisfactionScore)
    difference: int = 0  # engaged - non_engaged, rounded from unrounded scores


@dataclass(frozen=True)
class CostStats:
    count: int = 0
    minimum: float = 0.0
    maximum: float = 0.0
    mean: float = 0.0
    variance: float = 0.0  # population variance
    std_dev: float = 0.0
    cv: float = 0.0  # std_dev / mean * 100
    variability: str = "Low"  # High | Medium | Low


@dataclass(frozen=True)
class CategoryStats:
    category: str
    rows: int
    satisfaction: SatisfactionScore
    cost: CostStats


@dataclass(frozen=True)
class CategoryBreakdown:
    categories: tuple[CategoryStats, ...] = ()
    highest_cv: str = ""
    lowest_cv: str = ""
    highest_rating: str = ""
    lowest_rating: str = ""
    highest_cost: str = ""
    lowest_cost: str = ""
    overall_mean_cost: float = 0.0

    def get(self, category: str) -> CategoryStats | None:
        return next((c for c in self.categories if c.category == category), None)


@dataclass(frozen=True)
class CategorySegment:
    category: str
    engaged_score: int
    non_engaged_score: int
    difference: int
    leader: str  # Digital | Non-Digital | Equal


@dataclass(frozen=True)
class MonthlyCounts:
    months: tuple[int, ...] = ()  # ascending month numbers
    categories: tuple[str, ...] = ()  # first-seen order
    counts: dict[tuple[str, int], int] = field(default_factory=dict, hash=False)

    def count(self, category: str, month: int) -> int:
        return self.counts.get((category, month), 0)

    def series(self, category: str) -> list[int]:
        return [self.count(category, m) for m in self.months]


@dataclass(frozen=True)
class DatasetSummary:
    rows: int
    satisfaction: SatisfactionScore
    engagement: EngagementSplit
    segments: SegmentComparison
    breakdown: CategoryBreakdown
    category_segments: tuple[CategorySegment, ...]
    monthly: MonthlyCounts

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready form (tuple keys of monthly counts flattened)."""
        data = asdict(self)
        data["monthly"]["counts"] = [
            {"category": cat, "month": month, "count": n}
            for (cat, month), n in self.monthly.counts.items()
        ]
        return data
