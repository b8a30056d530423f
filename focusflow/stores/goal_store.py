#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
FocusFlow - Goal Store
Goals plus their per-day completions and misses

A (goal, day) pair is either unset, completed or missed. Recording one
outcome always deletes the other, remotely first and then in memory.
"""

import logging
import math
from datetime import time
from typing import List, Optional

from focusflow.core.database import RemoteOperationError
from focusflow.core.models import Goal, GoalCompletion, GoalMiss, GoalStatus, weekday_name
from focusflow.stores import reducers
from focusflow.stores.base import BaseStore
from focusflow.utils.datetime_utils import DateLike, iter_days, month_bounds, to_date

logger = logging.getLogger(__name__)


class GoalStore(BaseStore):
    """In-memory goals, completions and misses for the signed-in user"""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.goals: List[Goal] = []
        self.completions: List[GoalCompletion] = []
        self.misses: List[GoalMiss] = []

    # ===== QUERIES (no state changes) =====

    async def load_goals(self) -> List[Goal]:
        user_id = await self._user_id()
        rows = await self._retry(
            lambda: self.db.table("goals")
            .eq("user_id", user_id)
            .order("created_at", descending=True)
            .fetch()
        )
        return [Goal.from_row(row) for row in rows]

    async def load_completions(self, start: DateLike, end: DateLike) -> List[GoalCompletion]:
        start, end = to_date(start), to_date(end)
        user_id = await self._user_id()
        rows = await self._retry(
            lambda: self.db.table("goal_completions")
            .eq("user_id", user_id)
            .gte("completed_date", start)
            .lte("completed_date", end)
            .fetch()
        )
        return [GoalCompletion.from_row(row) for row in rows]

    async def load_misses(self, start: DateLike, end: DateLike) -> List[GoalMiss]:
        start, end = to_date(start), to_date(end)
        user_id = await self._user_id()
        rows = await self._retry(
            lambda: self.db.table("goal_misses")
            .eq("user_id", user_id)
            .gte("missed_date", start)
            .lte("missed_date", end)
            .order("missed_date", descending=True)
            .fetch()
        )
        return [GoalMiss.from_row(row) for row in rows]

    # ===== FETCHES =====

    async def fetch_goals(self) -> List[Goal]:
        self._begin(fetch=True)
        try:
            goals = await self.load_goals()
        except Exception as e:
            self.goals = []
            self._fail("fetch goals", e, fetch=True)
            raise
        self.goals = goals
        self._succeed(fetch=True)
        return goals

    async def fetch_completions(self, start: DateLike, end: DateLike) -> List[GoalCompletion]:
        self._begin(fetch=True)
        try:
            completions = await self.load_completions(start, end)
        except Exception as e:
            self.completions = []
            self._fail("fetch completions", e, fetch=True)
            raise
        self.completions = completions
        self._succeed(fetch=True)
        return completions

    async def fetch_misses(self, start: DateLike, end: DateLike) -> List[GoalMiss]:
        self._begin(fetch=True)
        try:
            misses = await self.load_misses(start, end)
        except Exception as e:
            self.misses = []
            self._fail("fetch misses", e, fetch=True)
            raise
        self.misses = misses
        self._succeed(fetch=True)
        return misses

    # ===== GOAL MUTATIONS =====

    async def add_goal(
        self,
        title: str,
        frequency: List[str],
        start_date: DateLike,
        description: str = "",
        color: str = "#6366f1",
        end_date: Optional[DateLike] = None,
        start_time: Optional[time] = None,
        end_time: Optional[time] = None,
    ) -> Goal:
        self._begin()
        try:
            goal = Goal(
                id=None,
                title=title,
                frequency=frequency,
                start_date=to_date(start_date),
                end_date=to_date(end_date) if end_date is not None else None,
                description=description,
                color=color,
                start_time=start_time,
                end_time=end_time,
            )
            user_id = await self._user_id()
            # Inserts are sent once: a retried insert could duplicate the goal
            row = await self.db.table("goals").insert({**goal.to_values(), "user_id": user_id})
        except Exception as e:
            self._fail("add goal", e)
            raise

        created = Goal.from_row(row)
        self.goals = reducers.prepend(self.goals, created)
        logger.info(f"🎯 Goal added: {created.title}")
        return created

    async def update_goal(self, goal: Goal) -> Goal:
        self._begin()
        try:
            user_id = await self._user_id()
            rows = await self._retry(
                lambda: self.db.table("goals")
                .eq("id", goal.id)
                .eq("user_id", user_id)
                .update(goal.to_values())
            )
            if not rows:
                raise RemoteOperationError(f"Goal {goal.id} not found", table="goals", operation="update")
        except Exception as e:
            self._fail("update goal", e)
            raise

        updated = Goal.from_row(rows[0])
        self.goals = reducers.replace_by_id(self.goals, updated)
        return updated

    async def delete_goal(self, goal_id: str) -> None:
        self._begin()
        try:
            user_id = await self._user_id()
            await self._retry(
                lambda: self.db.table("goals").eq("id", goal_id).eq("user_id", user_id).delete()
            )
        except Exception as e:
            self._fail("delete goal", e)
            raise

        self.goals = reducers.remove_by_id(self.goals, goal_id)
        self.completions = reducers.remove_where(self.completions, lambda c: c.goal_id == goal_id)
        self.misses = reducers.remove_where(self.misses, lambda m: m.goal_id == goal_id)

    # ===== DAY STATUS MUTATIONS =====

    async def toggle_goal_completion(self, goal_id: str, day: DateLike) -> Optional[GoalCompletion]:
        """
        Complete the goal for the day, or undo an existing completion.

        Returns the new completion, or None when one was removed. Completing
        a missed day deletes the miss.
        """
        self._begin()
        try:
            day = to_date(day)
            user_id = await self._user_id()
            existing = await self._retry(
                lambda: self.db.table("goal_completions")
                .eq("user_id", user_id)
                .eq("goal_id", goal_id)
                .eq("completed_date", day)
                .fetch_one()
            )

            if existing:
                await self._retry(lambda: self.db.table("goal_completions").eq("id", existing["id"]).delete())
            else:
                await self._retry(
                    lambda: self.db.table("goal_misses")
                    .eq("user_id", user_id)
                    .eq("goal_id", goal_id)
                    .eq("missed_date", day)
                    .delete()
                )
                row = await self.db.table("goal_completions").insert({
                    "goal_id": goal_id,
                    "completed_date": day,
                    "user_id": user_id,
                })
        except Exception as e:
            self._fail("toggle goal completion", e)
            raise

        if existing:
            self.completions = reducers.remove_where(
                self.completions, lambda c: c.goal_id == goal_id and c.completed_date == day
            )
            return None

        completion = GoalCompletion.from_row(row)
        self.completions, self.misses = reducers.add_completion(self.completions, self.misses, completion)
        return completion

    async def mark_goal_missed(
        self,
        goal_id: str,
        day: DateLike,
        reason: str = "",
        improvement_plan: str = "",
    ) -> GoalMiss:
        """
        Record a miss for the day, or update reason and plan of an existing
        one. A completion for the same day is deleted.
        """
        self._begin()
        try:
            day = to_date(day)
            user_id = await self._user_id()
            existing = await self._retry(
                lambda: self.db.table("goal_misses")
                .eq("user_id", user_id)
                .eq("goal_id", goal_id)
                .eq("missed_date", day)
                .fetch_one()
            )

            if existing:
                rows = await self._retry(
                    lambda: self.db.table("goal_misses")
                    .eq("id", existing["id"])
                    .update({"reason": reason, "improvement_plan": improvement_plan})
                )
                row = rows[0]
            else:
                await self._retry(
                    lambda: self.db.table("goal_completions")
                    .eq("user_id", user_id)
                    .eq("goal_id", goal_id)
                    .eq("completed_date", day)
                    .delete()
                )
                row = await self.db.table("goal_misses").insert({
                    "goal_id": goal_id,
                    "missed_date": day,
                    "reason": reason,
                    "improvement_plan": improvement_plan,
                    "user_id": user_id,
                })
        except Exception as e:
            self._fail("mark goal as missed", e)
            raise

        miss = GoalMiss.from_row(row)
        if existing and any(m.id == miss.id for m in self.misses):
            self.misses = reducers.replace_by_id(self.misses, miss)
        else:
            self.completions, self.misses = reducers.add_miss(self.completions, self.misses, miss)
        return miss

    # ===== DERIVED =====

    def get_goal(self, goal_id: str) -> Optional[Goal]:
        return next((goal for goal in self.goals if goal.id == goal_id), None)

    def goals_for_day(self, day: DateLike) -> List[Goal]:
        day = to_date(day)
        return [goal for goal in self.goals if goal.is_active_on(day)]

    def get_goal_status(self, goal_id: str, day: DateLike) -> GoalStatus:
        day = to_date(day)
        if any(c.goal_id == goal_id and c.completed_date == day for c in self.completions):
            return GoalStatus.COMPLETED
        if any(m.goal_id == goal_id and m.missed_date == day for m in self.misses):
            return GoalStatus.MISSED
        return GoalStatus.UNSET

    def get_goal_completion_rate(self, goal_id: str, month: DateLike) -> int:
        """
        Percentage of the month's scheduled days (from the goal's start date
        on) that have a completion. Uses only the fetched completions.
        """
        goal = self.get_goal(goal_id)
        if goal is None:
            return 0

        first, last = month_bounds(to_date(month))
        completed_days = {c.completed_date for c in self.completions if c.goal_id == goal_id}

        total_days = 0
        completed = 0
        for day in iter_days(max(first, goal.start_date), last):
            if weekday_name(day) in goal.frequency:
                total_days += 1
                if day in completed_days:
                    completed += 1

        if total_days == 0:
            return 0
        return math.floor(completed / total_days * 100 + 0.5)
