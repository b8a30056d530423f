# focusflow/services/analytics.py

"""
Goal analytics over the last 30 days of completions

Pure functions over the goal store's slices; nothing here touches the
database.
"""

import math
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Dict, List, Sequence, Tuple

from focusflow.core.models import Goal, GoalCompletion, weekday_name

ANALYTICS_WINDOW_DAYS = 30
WEEK_LABELS = ("Week 1", "Week 2", "Week 3", "Week 4")


@dataclass
class AnalyticsReport:
    daily_labels: List[str] = field(default_factory=list)
    daily_rates: List[float] = field(default_factory=list)
    weekly_counts: Dict[str, int] = field(default_factory=dict)
    overall_rate: int = 0
    total_completions: int = 0

    def to_dict(self) -> Dict:
        return {
            "daily": [{"label": label, "rate": rate} for label, rate in zip(self.daily_labels, self.daily_rates)],
            "weekly": dict(self.weekly_counts),
            "overall_rate": self.overall_rate,
            "total_completions": self.total_completions,
        }


def last_seven_days(
    goals: Sequence[Goal],
    completions: Sequence[GoalCompletion],
    today: date,
) -> Tuple[List[str], List[float]]:
    """Per-day completion percentage for the week ending today, oldest first"""
    labels, rates = [], []
    for offset in range(6, -1, -1):
        day = today - timedelta(days=offset)
        done = sum(1 for c in completions if c.completed_date == day)
        labels.append(weekday_name(day)[:3])
        rates.append(done / len(goals) * 100 if goals else 0)
    return labels, rates


def weekly_buckets(completions: Sequence[GoalCompletion]) -> Dict[str, int]:
    """Completions by day of month: 1-7, 8-14, 15-21 and 22 onwards"""
    counts = dict.fromkeys(WEEK_LABELS, 0)
    for completion in completions:
        index = min((completion.completed_date.day - 1) // 7, len(WEEK_LABELS) - 1)
        counts[WEEK_LABELS[index]] += 1
    return counts


def overall_rate(goals: Sequence[Goal], completions: Sequence[GoalCompletion]) -> int:
    possible = len(goals) * ANALYTICS_WINDOW_DAYS
    if possible == 0:
        return 0
    return math.floor(len(completions) / possible * 100 + 0.5)


def build_report(
    goals: Sequence[Goal],
    completions: Sequence[GoalCompletion],
    today: date,
) -> AnalyticsReport:
    labels, rates = last_seven_days(goals, completions, today)
    return AnalyticsReport(
        daily_labels=labels,
        daily_rates=rates,
        weekly_counts=weekly_buckets(completions),
        overall_rate=overall_rate(goals, completions),
        total_completions=len(completions),
    )


def analytics_range(today: date) -> Tuple[date, date]:
    """Completion range the report expects the goal store to have fetched"""
    return today - timedelta(days=ANALYTICS_WINDOW_DAYS), today
