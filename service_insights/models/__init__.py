"""Domain models for the service insights tool.

Dataset and issues are the working state of a session; analytics results and
issue records are derived, read-only outputs.
"""

from .analytics import (
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
from .config_models import ColumnMapping, InsightsConfig, StorageSettings, ValidationSettings, VariabilitySettings
from .dataset import Dataset, Record
from .issue import ConfirmedException, Issue
from .issue_record import IssueRecord

__all__ = [
    # Configuration models
    "ColumnMapping",
    "InsightsConfig",
    "StorageSettings",
    "ValidationSettings",
    "VariabilitySettings",
    # Working state
    "Dataset",
    "Record",
    "Issue",
    "ConfirmedException",
    "IssueRecord",
    # Analytics results
    "CategoryBreakdown",
    "CategorySegment",
    "CategoryStats",
    "CostStats",
    "DatasetSummary",
    "EngagementSplit",
    "MonthlyCounts",
    "SatisfactionScore",
    "SegmentComparison",
]
