#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
FocusFlow - Core Data Models
Client-side copies of the database rows, with validation
"""

from dataclasses import asdict, dataclass, field, fields
from datetime import date, datetime, time
from enum import Enum
from typing import Any, Dict, List, Optional
import logging

logger = logging.getLogger(__name__)

WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


def weekday_name(day: date) -> str:
    return WEEKDAYS[day.weekday()]


# ===== ENUMS =====

class GoalStatus(Enum):
    """Status of a goal on one day"""
    UNSET = "unset"
    COMPLETED = "completed"
    MISSED = "missed"


class ExportFormat(str, Enum):
    """Calendar export targets"""
    GOOGLE = "google"
    ICAL = "ical"


# ===== VALIDATION HELPERS =====

class ValidationError(Exception):
    """Invalid input data"""
    pass


def validate_text(text: str, min_length: int = 1, max_length: int = 1000, field_name: str = "text") -> str:
    if not isinstance(text, str):
        raise ValidationError(f"{field_name} must be a string")

    text = text.strip()
    if len(text) < min_length:
        raise ValidationError(f"{field_name} must be at least {min_length} characters")
    if len(text) > max_length:
        raise ValidationError(f"{field_name} must be at most {max_length} characters")
    return text


def validate_frequency(frequency: List[str]) -> List[str]:
    unknown = [day for day in frequency if day not in WEEKDAYS]
    if unknown:
        raise ValidationError(f"Unknown weekday names: {unknown}")
    return list(frequency)


class RowModel:
    """Mixin for dataclasses built from database rows"""

    @classmethod
    def from_row(cls, row: Dict[str, Any]):
        names = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in row.items() if key in names})

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# ===== GOALS =====

@dataclass
class Goal(RowModel):
    """A recurring habit scheduled on weekdays"""
    id: Optional[str]
    title: str
    start_date: date
    frequency: List[str] = field(default_factory=list)
    description: str = ""
    color: str = "#6366f1"
    end_date: Optional[date] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    user_id: Optional[str] = None
    created_at: Optional[datetime] = None

    def __post_init__(self):
        self.title = validate_text(self.title, max_length=200, field_name="title")
        self.frequency = validate_frequency(self.frequency)
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValidationError("end_date cannot be before start_date")

    def is_active_on(self, day: date) -> bool:
        """Scheduled on ``day``: within [start, end] and on a frequency weekday"""
        if day < self.start_date:
            return False
        if self.end_date is not None and day > self.end_date:
            return False
        return weekday_name(day) in self.frequency

    def to_values(self) -> Dict[str, Any]:
        """Editable columns"""
        return {
            "title": self.title,
            "description": self.description,
            "color": self.color,
            "frequency": list(self.frequency),
            "start_date": self.start_date,
            "end_date": self.end_date,
            "start_time": self.start_time,
            "end_time": self.end_time,
        }


@dataclass
class GoalCompletion(RowModel):
    id: str
    goal_id: str
    completed_date: date
    user_id: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass
class GoalMiss(RowModel):
    id: str
    goal_id: str
    missed_date: date
    reason: str = ""
    improvement_plan: str = ""
    user_id: Optional[str] = None
    created_at: Optional[datetime] = None


# ===== MOOD & ENERGY =====

@dataclass
class Mood(RowModel):
    id: str
    mood: str
    created_at: datetime
    user_id: Optional[str] = None


@dataclass
class HourlyEnergyLevel(RowModel):
    id: str
    hour: int
    level: int
    date: date
    notes: Optional[str] = None
    recorded_at: Optional[datetime] = None
    user_id: Optional[str] = None


@dataclass
class HourlyAverage:
    hour: int
    average_level: float
    record_count: int


# ===== PLANNER =====

@dataclass
class DailyTask(RowModel):
    id: str
    content: str
    start_time: time
    end_time: time
    date: date
    user_id: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass
class PlannerEntry:
    """One line of the daily timeline: a stored task or a goal slot"""
    id: str
    content: str
    start_time: str  # HH:MM
    end_time: str  # HH:MM
    date: date
    is_goal: bool = False
    color: Optional[str] = None


# ===== PROFILE =====

@dataclass
class Avatar(RowModel):
    id: str
    name: str
    emoji: str
    color: str


@dataclass
class UserProfile(RowModel):
    id: str
    user_id: str
    avatar_id: str
    avatar: Optional[Avatar] = None


@dataclass
class User(RowModel):
    id: str
    email: str
    created_at: Optional[datetime] = None


@dataclass
class Session:
    """An authenticated session"""
    access_token: str
    user: User
    created_at: datetime
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at


# ===== STATS =====

@dataclass
class Stats:
    current_streak: int = 0
    completion_rate: int = 0
    active_goals: int = 0
