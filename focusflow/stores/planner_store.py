#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
FocusFlow - Daily Planner Store
Timeline of one day: stored tasks merged with the goals scheduled that day
"""

import logging
from datetime import date
from typing import List, Optional

from focusflow.core.models import DailyTask, Goal, PlannerEntry, ValidationError, validate_text
from focusflow.stores import reducers
from focusflow.stores.base import BaseStore
from focusflow.stores.goal_store import GoalStore
from focusflow.utils.datetime_utils import DateLike, format_time, parse_time, to_date

logger = logging.getLogger(__name__)

GOAL_ENTRY_PREFIX = "goal-"


def task_entry(task: DailyTask) -> PlannerEntry:
    return PlannerEntry(
        id=task.id,
        content=task.content,
        start_time=format_time(task.start_time),
        end_time=format_time(task.end_time),
        date=task.date,
    )


def goal_entry(goal: Goal, day: date) -> PlannerEntry:
    return PlannerEntry(
        id=f"{GOAL_ENTRY_PREFIX}{goal.id}",
        content=goal.title,
        start_time=format_time(goal.start_time),
        end_time=format_time(goal.end_time),
        date=day,
        is_goal=True,
        color=goal.color,
    )


def sort_entries(entries: List[PlannerEntry]) -> List[PlannerEntry]:
    return sorted(entries, key=lambda entry: entry.start_time)


class DailyPlannerStore(BaseStore):
    """Reads the goal slice of ``goal_store``; goal entries are never persisted"""

    def __init__(self, *args, goal_store: Optional[GoalStore] = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.goal_store = goal_store
        self.tasks: List[PlannerEntry] = []

    async def fetch_tasks(self, day: DateLike) -> List[PlannerEntry]:
        self._begin(fetch=True)
        try:
            day = to_date(day)
            user_id = await self._user_id()
            rows = await self._retry(
                lambda: self.db.table("daily_tasks")
                .eq("user_id", user_id)
                .eq("date", day)
                .order("start_time")
                .fetch()
            )
        except Exception as e:
            self.tasks = []
            self._fail("fetch tasks", e, fetch=True)
            raise

        entries = [task_entry(DailyTask.from_row(row)) for row in rows]
        if self.goal_store is not None:
            entries.extend(goal_entry(goal, day) for goal in self.goal_store.goals_for_day(day))

        self.tasks = sort_entries(entries)
        self._succeed(fetch=True)
        return self.tasks

    async def add_task(self, content: str, start_time, end_time, day: DateLike) -> PlannerEntry:
        self._begin()
        try:
            content = validate_text(content, field_name="content")
            start, end = parse_time(start_time), parse_time(end_time)
            if end < start:
                raise ValidationError("end_time cannot be before start_time")
            day = to_date(day)

            user_id = await self._user_id()
            row = await self.db.table("daily_tasks").insert({
                "user_id": user_id,
                "content": content,
                "start_time": start,
                "end_time": end,
                "date": day,
            })
        except Exception as e:
            self._fail("add task", e)
            raise

        entry = task_entry(DailyTask.from_row(row))
        self.tasks = sort_entries(reducers.append(self.tasks, entry))
        return entry

    async def delete_task(self, task_id: str) -> None:
        self._begin()
        try:
            if not task_id.startswith(GOAL_ENTRY_PREFIX):
                user_id = await self._user_id()
                await self._retry(
                    lambda: self.db.table("daily_tasks").eq("id", task_id).eq("user_id", user_id).delete()
                )
        except Exception as e:
            self._fail("delete task", e)
            raise

        self.tasks = reducers.remove_by_id(self.tasks, task_id)
