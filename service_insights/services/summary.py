from __future__ import annotations

from collections.abc import Sequence

from ..models.analytics import DatasetSummary
from ..models.issue import Issue
from .analytics import month_name

"""SUMMARY line rendering for the CLI.

Formats (contracts/summary_output.md):
    SUMMARY rows={n} issues={n} confirmable={n} confirmed={n} complete={yes|no}
    SUMMARY rows={n} nps={int} avg_rating={x.y} engaged_pct={int} categories={n}
"""

__all__ = [
    "render_validation_summary",
    "render_analytics_summary",
    "render_issue_line",
    "render_report",
]


def render_validation_summary(rows: int, issues: Sequence[Issue], confirmed: int) -> str:
    """Render the validation SUMMARY line.

    Examples:
        >>> render_validation_summary(3, [], 0)
        'SUMMARY rows=3 issues=0 confirmable=0 confirmed=0 complete=yes'
    """
    confirmable = sum(1 for i in issues if i.confirmable)
    complete = "yes" if not issues else "no"
    return (
        f"SUMMARY rows={rows} "
        f"issues={len(issues)} "
        f"confirmable={confirmable} "
        f"confirmed={confirmed} "
        f"complete={complete}"
    )


def render_analytics_summary(summary: DatasetSummary) -> str:
    return (
        f"SUMMARY rows={summary.rows} "
        f"nps={summary.satisfaction.score} "
        f"avg_rating={summary.satisfaction.average_rating:.1f} "
        f"engaged_pct={summary.engagement.engaged_percentage} "
        f"categories={len(summary.breakdown.categories)}"
    )


def render_issue_line(number: int, issue: Issue) -> str:
    """One operator-facing line: ``#n row=r column=c value='v' reason [confirmable]``."""
    flag = " [confirmable]" if issue.confirmable else ""
    return f"#{number} row={issue.display_row} column={issue.column} value={issue.value!r} {issue.reason}{flag}"


def render_report(summary: DatasetSummary) -> list[str]:
    """Human-readable analytics report, one entry per line."""
    s = summary.satisfaction
    seg = summary.segments
    eng = summary.engagement
    bd = summary.breakdown
    lines = [
        f"NPS {s.score} (promoters={s.promoters} passives={s.passives} detractors={s.detractors}) "
        f"average rating {s.average_rating:.1f}/10",
        f"Digital engagement {eng.engaged}/{eng.total} ({eng.engaged_percentage}%)",
        f"NPS digital={seg.engaged.score} non-digital={seg.non_engaged.score} difference={seg.difference:+d}",
        f"Overall average cost ${bd.overall_mean_cost:.2f}",
    ]
    for c in bd.categories:
        lines.append(
            f"  {c.category}: rows={c.rows} nps={c.satisfaction.score} "
            f"avg_rating={c.satisfaction.average_rating:.1f} "
            f"cost_avg=${c.cost.mean:.2f} min=${c.cost.minimum:.2f} max=${c.cost.maximum:.2f} "
            f"cv={c.cost.cv:.1f}% ({c.cost.variability})"
        )
    if bd.categories:
        lines.append(f"Highest price variability: {bd.highest_cv or '-'}; lowest: {bd.lowest_cv or '-'}")
        lines.append(f"Best rated: {bd.highest_rating or '-'}; worst rated: {bd.lowest_rating or '-'}")
    for cs in summary.category_segments:
        lines.append(
            f"  {cs.category}: digital={cs.engaged_score} non-digital={cs.non_engaged_score} "
            f"leader={cs.leader}"
        )
    monthly = summary.monthly
    if monthly.months:
        header = " ".join(month_name(m) for m in monthly.months)
        lines.append(f"Services per month: {header}")
        for cat in monthly.categories:
            counts = " ".join(str(n) for n in monthly.series(cat))
            lines.append(f"  {cat}: {counts}")
    return lines
