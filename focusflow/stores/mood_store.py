#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
FocusFlow - Mood Store
Today's mood and the moods of a calendar range
"""

import logging
from typing import List, Optional

from focusflow.core.models import Mood, validate_text
from focusflow.stores import reducers
from focusflow.stores.base import BaseStore
from focusflow.utils.datetime_utils import DateLike, day_bounds_utc, to_date

logger = logging.getLogger(__name__)


class MoodStore(BaseStore):

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.todays_mood: Optional[Mood] = None
        self.moods: List[Mood] = []

    # ===== QUERIES =====

    async def load_todays_mood(self) -> Optional[Mood]:
        user_id = await self._user_id()
        start, end = day_bounds_utc(self.today(), self.tz_name)
        row = await self._retry(
            lambda: self.db.table("moods")
            .eq("user_id", user_id)
            .gte("created_at", start)
            .lt("created_at", end)
            .order("created_at", descending=True)
            .fetch_one()
        )
        return Mood.from_row(row) if row else None

    async def load_month_moods(self, start: DateLike, end: DateLike) -> List[Mood]:
        """Moods created from the start of ``start`` to the end of ``end``"""
        range_start, _ = day_bounds_utc(to_date(start), self.tz_name)
        _, range_end = day_bounds_utc(to_date(end), self.tz_name)
        user_id = await self._user_id()
        rows = await self._retry(
            lambda: self.db.table("moods")
            .eq("user_id", user_id)
            .gte("created_at", range_start)
            .lt("created_at", range_end)
            .order("created_at")
            .fetch()
        )
        return [Mood.from_row(row) for row in rows]

    # ===== ACTIONS =====

    async def fetch_todays_mood(self) -> Optional[Mood]:
        self._begin(fetch=True)
        try:
            mood = await self.load_todays_mood()
        except Exception as e:
            self.todays_mood = None
            self._fail("fetch today's mood", e, fetch=True)
            raise
        self.todays_mood = mood
        self._succeed(fetch=True)
        return mood

    async def fetch_month_moods(self, start: DateLike, end: DateLike) -> List[Mood]:
        self._begin(fetch=True)
        try:
            moods = await self.load_month_moods(start, end)
        except Exception as e:
            self.moods = []
            self._fail("fetch moods", e, fetch=True)
            raise
        self.moods = moods
        self._succeed(fetch=True)
        return moods

    async def set_todays_mood(self, mood: str) -> Mood:
        self._begin()
        try:
            mood = validate_text(mood, max_length=100, field_name="mood")
            user_id = await self._user_id()
            row = await self.db.table("moods").insert({"user_id": user_id, "mood": mood})
        except Exception as e:
            self._fail("set mood", e)
            raise

        created = Mood.from_row(row)
        self.todays_mood = created
        self.moods = reducers.append(self.moods, created)
        logger.info(f"😊 Mood recorded: {created.mood}")
        return created
