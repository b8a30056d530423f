# focusflow/ui/calendar_view.py

"""
Calendar view controller

Shows a month or a week of goals, completions, misses and moods. A valid
cached snapshot is shown at once; otherwise the range is fetched and the
view waits for it only briefly, so navigation never blocks on the network.
Once a range is on display the neighbouring ranges are preloaded into the cache.
"""

import asyncio
import logging
from datetime import date, timedelta
from typing import Awaitable, List, Optional, Set, Tuple

from focusflow.core.models import Goal, GoalStatus
from focusflow.stores.goal_store import GoalStore
from focusflow.stores.mood_store import MoodStore
from focusflow.ui.calendar_cache import CacheKey, CalendarCache, CalendarSnapshot, ViewMode
from focusflow.utils.datetime_utils import DateLike, add_months, month_bounds, to_date, week_bounds

logger = logging.getLogger(__name__)

FETCH_TIMEOUT = 0.1  # seconds
PRELOAD_DELAY = 0.5  # seconds

LOAD_ERROR_MESSAGE = "Failed to load calendar data. Please try again."
UPDATE_ERROR_MESSAGE = "Failed to update goal status. Please try again."
MISS_ERROR_MESSAGE = "Failed to mark goal as missed. Please try again."


def range_for(day: date, view: ViewMode) -> Tuple[date, date]:
    if view is ViewMode.WEEK:
        return week_bounds(day)
    return month_bounds(day)


def shift(day: date, view: ViewMode, steps: int) -> date:
    """Move by whole months or whole weeks"""
    if view is ViewMode.WEEK:
        return day + timedelta(days=7 * steps)
    return add_months(day, steps)


class CalendarView:

    def __init__(
        self,
        goal_store: GoalStore,
        mood_store: MoodStore,
        cache: Optional[CalendarCache] = None,
        view: ViewMode = ViewMode.MONTH,
        current: Optional[DateLike] = None,
        fetch_timeout: float = FETCH_TIMEOUT,
        preload_delay: float = PRELOAD_DELAY,
    ):
        self.goal_store = goal_store
        self.mood_store = mood_store
        self.cache = cache if cache is not None else CalendarCache()
        self.view = ViewMode(view)
        self.current = to_date(current) if current is not None else goal_store.today()
        self.fetch_timeout = fetch_timeout
        self.preload_delay = preload_delay

        self.snapshot: Optional[CalendarSnapshot] = None
        self.loading = False
        self.error: Optional[str] = None
        self.data_loaded = False
        self.mounted = True
        self._tasks: Set[asyncio.Task] = set()

    # ===== RANGE =====

    def key_for(self, day: date) -> CacheKey:
        start, end = range_for(day, self.view)
        return CacheKey(start=start, end=end, view=self.view)

    @property
    def cache_key(self) -> CacheKey:
        return self.key_for(self.current)

    def _is_displayed(self, key: CacheKey) -> bool:
        return self.mounted and key == self.cache_key

    def _display(self, snapshot: CalendarSnapshot) -> None:
        self.snapshot = snapshot
        self.data_loaded = True

    # ===== LOADING =====

    async def load(self, force: bool = False) -> Optional[CalendarSnapshot]:
        """
        Show the current range. Returns the snapshot on display once the
        cache answered or the fetch finished or timed out, whichever is first.
        """
        key = self.cache_key
        self.error = None

        cached = None if force else self.cache.get(key)
        if cached is not None:
            self._display(cached)
            self.loading = False
            self._schedule_preload(cached)
            return self.snapshot

        self.loading = True
        task = self._spawn(self._fetch_range(key, preload=True))
        # The fetch keeps running after a timeout and fills the cache later
        await asyncio.wait({task}, timeout=self.fetch_timeout)
        self.loading = False
        return self.snapshot

    async def refresh(self) -> Optional[CalendarSnapshot]:
        """Fetch the current range to completion, overwriting its cache entry"""
        await self._fetch_range(self.cache_key)
        return self.snapshot

    async def _fetch_range(self, key: CacheKey, preload: bool = False) -> None:
        """
        Fetch one range into the cache and, if it is still on display, the
        view. With ``preload`` the neighbours are preloaded afterwards, but
        only when the goals arrived.
        """
        results = await asyncio.gather(
            self.goal_store.fetch_goals(),
            self.goal_store.fetch_completions(key.start, key.end),
            self.goal_store.fetch_misses(key.start, key.end),
            self.mood_store.fetch_month_moods(key.start, key.end),
            self.mood_store.fetch_todays_mood(),
            return_exceptions=True,
        )
        failures = [result for result in results if isinstance(result, Exception)]

        if len(failures) == len(results):
            logger.error(f"❌ Calendar fetch failed for {key.start}..{key.end}: {failures[0]}")
            if not self._is_displayed(key):
                return
            fallback = self.cache.get(key, count=False)
            if fallback is not None:
                self._display(fallback)
            else:
                self.error = LOAD_ERROR_MESSAGE
            return

        goals, completions, misses, moods, todays_mood = [
            None if isinstance(result, Exception) else result for result in results
        ]
        snapshot = CalendarSnapshot(
            goals=tuple(goals or ()),
            completions=tuple(completions or ()),
            misses=tuple(misses or ()),
            moods=tuple(moods or ()),
            todays_mood=todays_mood,
        )

        if failures:
            logger.warning(f"⚠️ Calendar fetch partly failed for {key.start}..{key.end}: {failures[0]}")
        else:
            self.cache.set(key, snapshot)

        if self._is_displayed(key):
            self._display(snapshot)
            if preload and goals is not None:
                self._schedule_preload(snapshot)

    # ===== PRELOADING =====

    def _schedule_preload(self, loaded: CalendarSnapshot) -> None:
        self._spawn(self._preload_adjacent(loaded))

    async def _preload_adjacent(self, loaded: CalendarSnapshot) -> None:
        await asyncio.sleep(self.preload_delay)
        for steps in (1, -1):
            key = self.key_for(shift(self.current, self.view, steps))
            if key not in self.cache:
                await self._preload(key, loaded)

    async def _preload(self, key: CacheKey, loaded: CalendarSnapshot) -> None:
        """
        Cache a range through the side-effect free queries; never touches view
        state. Goals and today's mood come from the snapshot already loaded.
        """
        results = await asyncio.gather(
            self.goal_store.load_completions(key.start, key.end),
            self.goal_store.load_misses(key.start, key.end),
            self.mood_store.load_month_moods(key.start, key.end),
            return_exceptions=True,
        )
        failures = [result for result in results if isinstance(result, Exception)]
        if failures:
            logger.debug(f"Preload of {key.start}..{key.end} skipped: {failures[0]}")
            return

        completions, misses, moods = results
        self.cache.set(key, CalendarSnapshot(
            goals=loaded.goals,
            completions=tuple(completions),
            misses=tuple(misses),
            moods=tuple(moods),
            todays_mood=loaded.todays_mood,
        ))
        logger.debug(f"Preloaded {key.view.value} {key.start}..{key.end}")

    # ===== NAVIGATION =====

    async def next(self) -> Optional[CalendarSnapshot]:
        self.current = shift(self.current, self.view, 1)
        return await self.load()

    async def previous(self) -> Optional[CalendarSnapshot]:
        self.current = shift(self.current, self.view, -1)
        return await self.load()

    async def set_view(self, view: ViewMode) -> Optional[CalendarSnapshot]:
        self.view = ViewMode(view)
        return await self.load()

    async def go_to(self, day: DateLike) -> Optional[CalendarSnapshot]:
        self.current = to_date(day)
        return await self.load()

    # ===== WRITES =====

    async def toggle_completion(self, goal_id: str, day: DateLike) -> bool:
        self.error = None
        try:
            await self.goal_store.toggle_goal_completion(goal_id, day)
        except Exception as e:
            logger.error(f"❌ Calendar could not toggle completion of {goal_id}: {e}")
            self.error = UPDATE_ERROR_MESSAGE
            return False
        await self.refresh()
        return True

    async def mark_missed(self, goal_id: str, day: DateLike, reason: str = "", improvement_plan: str = "") -> bool:
        self.error = None
        try:
            await self.goal_store.mark_goal_missed(goal_id, day, reason, improvement_plan)
        except Exception as e:
            logger.error(f"❌ Calendar could not mark {goal_id} as missed: {e}")
            self.error = MISS_ERROR_MESSAGE
            return False
        await self.refresh()
        return True

    # ===== DISPLAY HELPERS =====

    def goals_on(self, day: DateLike) -> List[Goal]:
        if self.snapshot is None:
            return []
        day = to_date(day)
        return [goal for goal in self.snapshot.goals if goal.is_active_on(day)]

    def status_on(self, goal_id: str, day: DateLike) -> GoalStatus:
        if self.snapshot is None:
            return GoalStatus.UNSET
        day = to_date(day)
        if any(c.goal_id == goal_id and c.completed_date == day for c in self.snapshot.completions):
            return GoalStatus.COMPLETED
        if any(m.goal_id == goal_id and m.missed_date == day for m in self.snapshot.misses):
            return GoalStatus.MISSED
        return GoalStatus.UNSET

    # ===== LIFECYCLE =====

    def _spawn(self, coro: Awaitable[None]) -> asyncio.Task:
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)
        return task

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error(f"❌ Calendar background task failed: {task.exception()}")

    def unmount(self) -> None:
        """Stop updating the display; running fetches still fill the cache"""
        self.mounted = False

    async def drain(self) -> None:
        """Wait for every background fetch and preload, including ones they start"""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def close(self) -> None:
        self.unmount()
        for task in list(self._tasks):
            task.cancel()
        await self.drain()
