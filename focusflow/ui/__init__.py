# focusflow/ui/__init__.py

from .calendar_cache import CacheKey, CalendarCache, CalendarSnapshot, ViewMode
from .calendar_view import CalendarView, LOAD_ERROR_MESSAGE

__all__ = [
    "CacheKey",
    "CalendarCache",
    "CalendarSnapshot",
    "CalendarView",
    "LOAD_ERROR_MESSAGE",
    "ViewMode",
]
