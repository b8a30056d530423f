#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
FocusFlow - Stats Store
Dashboard counters: current streak, 30-day completion rate, active goals
"""

import logging
import math
from datetime import date, timedelta
from typing import Iterable, Optional

from focusflow.core.models import Stats
from focusflow.stores.base import BaseStore

logger = logging.getLogger(__name__)

STATS_WINDOW_DAYS = 30


def current_streak(completed_days: Iterable[date], today: date) -> int:
    """Consecutive days ending today with at least one completion"""
    days = set(completed_days)
    streak = 0
    day = today
    while day in days:
        streak += 1
        day -= timedelta(days=1)
    return streak


def completion_rate(completions: int, active_goals: int, window: int = STATS_WINDOW_DAYS) -> int:
    possible = active_goals * window
    if possible <= 0:
        return 0
    return math.floor(completions / possible * 100 + 0.5)


class StatsStore(BaseStore):

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.stats = Stats()

    async def fetch_stats(self, today: Optional[date] = None) -> Stats:
        self._begin(fetch=True)
        try:
            today = today or self.today()
            since = today - timedelta(days=STATS_WINDOW_DAYS)
            user_id = await self._user_id()

            goal_rows = await self._retry(lambda: self.db.table("goals").eq("user_id", user_id).fetch())
            completion_rows = await self._retry(
                lambda: self.db.table("goal_completions")
                .eq("user_id", user_id)
                .gte("completed_date", since)
                .lte("completed_date", today)
                .fetch()
            )
        except Exception as e:
            self.stats = Stats()
            self._fail("fetch stats", e, fetch=True)
            raise

        # Every goal of the user counts, ended ones included
        active_goals = len(goal_rows)
        self.stats = Stats(
            current_streak=current_streak((row["completed_date"] for row in completion_rows), today),
            completion_rate=completion_rate(len(completion_rows), active_goals),
            active_goals=active_goals,
        )
        self._succeed(fetch=True)
        return self.stats
