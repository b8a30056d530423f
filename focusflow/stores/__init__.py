# focusflow/stores/__init__.py

"""
Domain stores of FocusFlow

Each store holds the latest fetched slice of its tables for the signed-in
user and updates it only after the remote write succeeded.
"""

from .auth_store import AuthStore
from .avatar_store import AvatarStore
from .base import BaseStore, StoreStatus
from .calendar_export_store import CalendarExportError, CalendarExportStore
from .energy_store import EnergyStore
from .goal_store import GoalStore
from .mood_store import MoodStore
from .planner_store import DailyPlannerStore
from .stats_store import StatsStore

__all__ = [
    "AuthStore",
    "AvatarStore",
    "BaseStore",
    "CalendarExportError",
    "CalendarExportStore",
    "DailyPlannerStore",
    "EnergyStore",
    "GoalStore",
    "MoodStore",
    "StatsStore",
    "StoreStatus",
]
