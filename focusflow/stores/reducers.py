"""
Pure state transitions applied after a confirmed remote write.

Each function returns new lists and leaves its inputs untouched.
"""

from datetime import date
from typing import Callable, List, Sequence, Tuple, TypeVar

from focusflow.core.models import GoalCompletion, GoalMiss

T = TypeVar("T")


def prepend(items: Sequence[T], item: T) -> List[T]:
    return [item, *items]


def append(items: Sequence[T], item: T) -> List[T]:
    return [*items, item]


def replace_by_id(items: Sequence[T], item: T) -> List[T]:
    return [item if existing.id == item.id else existing for existing in items]


def remove_by_id(items: Sequence[T], item_id: str) -> List[T]:
    return [existing for existing in items if existing.id != item_id]


def remove_where(items: Sequence[T], predicate: Callable[[T], bool]) -> List[T]:
    return [existing for existing in items if not predicate(existing)]


def upsert_by_id(items: Sequence[T], item: T, key: Callable[[T], object]) -> List[T]:
    """Replace or add ``item`` by id and keep the list sorted by ``key``"""
    return sorted([*remove_by_id(items, item.id), item], key=key)


# ===== COMPLETION / MISS =====

def add_completion(
    completions: Sequence[GoalCompletion],
    misses: Sequence[GoalMiss],
    completion: GoalCompletion,
) -> Tuple[List[GoalCompletion], List[GoalMiss]]:
    """A new completion replaces any miss for the same goal and day"""
    return (
        append(remove_where(completions, lambda c: _same_completion(c, completion.goal_id, completion.completed_date)),
               completion),
        remove_where(misses, lambda m: _same_miss(m, completion.goal_id, completion.completed_date)),
    )


def add_miss(
    completions: Sequence[GoalCompletion],
    misses: Sequence[GoalMiss],
    miss: GoalMiss,
) -> Tuple[List[GoalCompletion], List[GoalMiss]]:
    """A new miss replaces any completion for the same goal and day"""
    return (
        remove_where(completions, lambda c: _same_completion(c, miss.goal_id, miss.missed_date)),
        append(remove_where(misses, lambda m: _same_miss(m, miss.goal_id, miss.missed_date)), miss),
    )


def _same_completion(completion: GoalCompletion, goal_id: str, day: date) -> bool:
    return completion.goal_id == goal_id and completion.completed_date == day


def _same_miss(miss: GoalMiss, goal_id: str, day: date) -> bool:
    return miss.goal_id == goal_id and miss.missed_date == day
