# focusflow/context.py

"""
Application context of FocusFlow

Builds and wires the data service, authentication, stores, calendar view and
services for one application instance. Everything that used to be a
module-level singleton is an attribute here, so independent contexts (one
per test, for example) never share state.
"""

import logging
from datetime import date
from typing import Optional

from focusflow.config import Settings, get_settings
from focusflow.core.auth import AuthService
from focusflow.core.database import DataService
from focusflow.services.analytics import AnalyticsReport, analytics_range, build_report
from focusflow.services.chat_assistant import ChatAssistant
from focusflow.services.health_check import ConnectionMonitor
from focusflow.services.local_storage import LocalStorage
from focusflow.stores import (
    AuthStore,
    AvatarStore,
    CalendarExportStore,
    DailyPlannerStore,
    EnergyStore,
    GoalStore,
    MoodStore,
    StatsStore,
)
from focusflow.ui.calendar_cache import CalendarCache
from focusflow.ui.calendar_view import CalendarView

logger = logging.getLogger(__name__)


class AppContext:
    """
    Owner of every service and store

    Initialization order:
    1. DataService (schema and avatar catalog)
    2. AuthService and LocalStorage
    3. Stores, all sharing the same data and auth services
    4. Calendar cache, chat assistant and connection monitor
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        s = self.settings

        self.db = DataService(
            s.DATABASE_URL,
            echo=s.DB_ECHO,
            pool_size=s.DB_POOL_SIZE,
            max_overflow=s.DB_MAX_OVERFLOW,
        )
        self.auth = AuthService(self.db, session_timeout=s.SESSION_TIMEOUT)
        self.local_storage = LocalStorage(s.LOCAL_STORAGE_PATH)

        store_args = dict(retries=s.RETRY_MAX_ATTEMPTS, retry_delay=s.RETRY_INITIAL_DELAY, tz_name=s.TIMEZONE)
        self.goals = GoalStore(self.db, self.auth, **store_args)
        self.moods = MoodStore(self.db, self.auth, **store_args)
        self.energy = EnergyStore(self.db, self.auth, **store_args)
        self.planner = DailyPlannerStore(self.db, self.auth, goal_store=self.goals, **store_args)
        self.avatars = AvatarStore(self.db, self.auth, **store_args)
        self.stats = StatsStore(self.db, self.auth, **store_args)
        self.auth_store = AuthStore(self.auth, self.local_storage)
        self.calendar_export = CalendarExportStore(
            self.auth,
            export_url=s.EXPORT_URL,
            api_key=s.EXPORT_API_KEY,
            download_dir=s.DOWNLOAD_DIR,
        )

        self.calendar_cache = CalendarCache(ttl=s.CACHE_TTL)
        self.chat = ChatAssistant(
            self.local_storage,
            delay_min=s.CHAT_RESPONSE_DELAY_MIN,
            delay_max=s.CHAT_RESPONSE_DELAY_MAX,
        )
        self.monitor = ConnectionMonitor(
            self.db.ping,
            interval=s.HEALTH_CHECK_INTERVAL,
            max_retries=s.HEALTH_MAX_RETRIES,
            initial_delay=s.HEALTH_RETRY_DELAY,
            max_delay=s.HEALTH_MAX_DELAY,
        )
        self.initialized = False

    @classmethod
    async def create(cls, settings: Optional[Settings] = None, start_monitor: bool = False) -> "AppContext":
        context = cls(settings)
        await context.initialize(start_monitor=start_monitor)
        return context

    async def initialize(self, start_monitor: bool = False) -> None:
        logger.info(f"🔧 Initializing {self.settings.APP_NAME} v{self.settings.VERSION}...")
        await self.db.initialize()
        if start_monitor:
            await self.monitor.start()
        self.initialized = True
        logger.info("✅ All services initialized")

    def calendar_view(self, **kwargs) -> CalendarView:
        """New calendar view over the shared goal and mood stores and cache"""
        kwargs.setdefault("fetch_timeout", self.settings.CALENDAR_FETCH_TIMEOUT)
        kwargs.setdefault("preload_delay", self.settings.CALENDAR_PRELOAD_DELAY)
        return CalendarView(self.goals, self.moods, cache=self.calendar_cache, **kwargs)

    async def analytics_report(self, today: Optional[date] = None) -> AnalyticsReport:
        """Fetch goals and the last 30 days of completions, then summarize them"""
        today = today or self.goals.today()
        start, end = analytics_range(today)
        goals = await self.goals.fetch_goals()
        completions = await self.goals.fetch_completions(start, end)
        return build_report(goals, completions, today)

    async def sign_in(self, email: str, password: str):
        user = await self.auth_store.sign_in(email, password)
        self.chat.on_login()
        return user

    async def sign_out(self) -> None:
        await self.auth_store.sign_out()
        self.chat.on_logout()
        self.calendar_cache.clear()

    async def close(self) -> None:
        logger.info("🛑 Closing services...")
        await self.monitor.stop()
        await self.db.close()
        self.initialized = False
        logger.info("✅ All services closed")

    async def __aenter__(self) -> "AppContext":
        if not self.initialized:
            await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
