# focusflow/ui/calendar_cache.py

"""
Time-limited cache of calendar snapshots keyed by date range and view
"""

import logging
import time
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Callable, Dict, Generic, List, Optional, Tuple, TypeVar

from focusflow.core.models import Goal, GoalCompletion, GoalMiss, Mood

logger = logging.getLogger(__name__)

CACHE_TTL = 300  # seconds

V = TypeVar("V")


class ViewMode(str, Enum):
    MONTH = "month"
    WEEK = "week"


@dataclass(frozen=True)
class CacheKey:
    start: date
    end: date
    view: ViewMode


@dataclass
class CacheEntry(Generic[V]):
    value: V
    inserted_at: float


@dataclass
class CacheStats:
    hits: int = 0
    misses: int = 0
    evictions: int = 0

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total else 0.0


@dataclass(frozen=True)
class CalendarSnapshot:
    """Everything the calendar shows for one range"""
    goals: Tuple[Goal, ...] = ()
    completions: Tuple[GoalCompletion, ...] = ()
    misses: Tuple[GoalMiss, ...] = ()
    moods: Tuple[Mood, ...] = ()
    todays_mood: Optional[Mood] = None


class CalendarCache(Generic[V]):
    """In-memory cache; an entry is valid while ``now - inserted_at < ttl``"""

    def __init__(self, ttl: float = CACHE_TTL, clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl
        self.clock = clock
        self.stats = CacheStats()
        self._entries: Dict[CacheKey, CacheEntry[V]] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: CacheKey) -> bool:
        return self.get(key, count=False) is not None

    def get(self, key: CacheKey, count: bool = True) -> Optional[V]:
        entry = self._entries.get(key)
        if entry is not None and self.clock() - entry.inserted_at < self.ttl:
            if count:
                self.stats.hits += 1
            return entry.value

        if entry is not None:
            del self._entries[key]
            self.stats.evictions += 1
        if count:
            self.stats.misses += 1
        return None

    def set(self, key: CacheKey, value: V) -> None:
        self._entries[key] = CacheEntry(value=value, inserted_at=self.clock())

    def delete(self, key: CacheKey) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()
        logger.debug("Calendar cache cleared")

    def keys(self) -> List[CacheKey]:
        return list(self._entries)
