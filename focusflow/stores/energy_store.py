#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
FocusFlow - Energy Store
Hourly energy levels for one day and per-hour averages over the last 30 days
"""

import logging
from datetime import timedelta
from typing import Dict, List, Optional

from focusflow.core.models import HourlyAverage, HourlyEnergyLevel, ValidationError
from focusflow.stores import reducers
from focusflow.stores.base import BaseStore
from focusflow.utils.datetime_utils import DateLike, to_date, utcnow

logger = logging.getLogger(__name__)

AVERAGE_WINDOW_DAYS = 30
HOURS_PER_DAY = 24


def compute_hourly_averages(levels: List[Dict]) -> List[HourlyAverage]:
    """One bucket per hour of the day; empty buckets average to 0"""
    totals = {hour: [0, 0] for hour in range(HOURS_PER_DAY)}
    for record in levels:
        bucket = totals[record["hour"]]
        bucket[0] += record["level"]
        bucket[1] += 1

    return [
        HourlyAverage(
            hour=hour,
            average_level=round(total / count, 2) if count else 0,
            record_count=count,
        )
        for hour, (total, count) in sorted(totals.items())
    ]


class EnergyStore(BaseStore):

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.hourly_levels: List[HourlyEnergyLevel] = []
        self.hourly_averages: List[HourlyAverage] = []

    async def fetch_hourly_levels(self, day: DateLike) -> List[HourlyEnergyLevel]:
        self._begin(fetch=True)
        try:
            day = to_date(day)
            user_id = await self._user_id()
            rows = await self._retry(
                lambda: self.db.table("hourly_energy_levels")
                .eq("user_id", user_id)
                .eq("date", day)
                .order("hour")
                .fetch()
            )
        except Exception as e:
            self.hourly_levels = []
            self._fail("fetch energy levels", e, fetch=True)
            raise

        self.hourly_levels = [HourlyEnergyLevel.from_row(row) for row in rows]
        self._succeed(fetch=True)
        return self.hourly_levels

    async def fetch_hourly_averages(self) -> List[HourlyAverage]:
        self._begin(fetch=True)
        try:
            today = self.today()
            since = today - timedelta(days=AVERAGE_WINDOW_DAYS)
            user_id = await self._user_id()
            rows = await self._retry(
                lambda: self.db.table("hourly_energy_levels")
                .eq("user_id", user_id)
                .gte("date", since)
                .lte("date", today)
                .fetch()
            )
        except Exception as e:
            self.hourly_averages = []
            self._fail("fetch energy averages", e, fetch=True)
            raise

        self.hourly_averages = compute_hourly_averages(rows)
        self._succeed(fetch=True)
        return self.hourly_averages

    async def set_hourly_level(
        self,
        hour: int,
        level: int,
        day: DateLike,
        notes: Optional[str] = None,
    ) -> HourlyEnergyLevel:
        """Create or overwrite the level of one hour, then refresh the averages"""
        self._begin()
        try:
            day = to_date(day)
            if not isinstance(hour, int) or not 0 <= hour < HOURS_PER_DAY:
                raise ValidationError(f"hour must be between 0 and {HOURS_PER_DAY - 1}")
            if not isinstance(level, int):
                raise ValidationError("level must be an integer")

            user_id = await self._user_id()
            existing = await self._retry(
                lambda: self.db.table("hourly_energy_levels")
                .eq("user_id", user_id)
                .eq("date", day)
                .eq("hour", hour)
                .fetch_one()
            )

            values = {"level": level, "recorded_at": utcnow()}
            if notes is not None:
                values["notes"] = notes

            if existing:
                rows = await self._retry(
                    lambda: self.db.table("hourly_energy_levels").eq("id", existing["id"]).update(values)
                )
                row = rows[0]
            else:
                row = await self.db.table("hourly_energy_levels").insert({
                    **values,
                    "user_id": user_id,
                    "hour": hour,
                    "date": day,
                })
        except Exception as e:
            self._fail("set energy level", e)
            raise

        record = HourlyEnergyLevel.from_row(row)
        self.hourly_levels = reducers.upsert_by_id(self.hourly_levels, record, key=lambda e: e.hour)
        logger.debug(f"⚡ Energy {record.level} recorded for {record.date} {record.hour:02d}:00")

        await self.fetch_hourly_averages()
        return record
