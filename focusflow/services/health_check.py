# focusflow/services/health_check.py

"""
Connection health monitor

Probes the database on an interval and keeps an ``is_healthy`` flag for
status displays. It never blocks or gates other operations.
"""

import asyncio
import logging
import random
from typing import Awaitable, Callable, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from focusflow.utils.datetime_utils import utcnow

logger = logging.getLogger(__name__)

HEALTH_CHECK_INTERVAL = 30  # seconds
MAX_RETRIES = 3
INITIAL_RETRY_DELAY = 1.0  # seconds
MAX_RETRY_DELAY = 10.0  # seconds

JOB_ID = "connection_health_check"


class ConnectionMonitor:

    def __init__(
        self,
        probe: Callable[[], Awaitable[object]],
        interval: float = HEALTH_CHECK_INTERVAL,
        max_retries: int = MAX_RETRIES,
        initial_delay: float = INITIAL_RETRY_DELAY,
        max_delay: float = MAX_RETRY_DELAY,
        jitter: Callable[[], float] = random.random,
    ):
        self.probe = probe
        self.interval = interval
        self.max_retries = max_retries
        self.initial_delay = initial_delay
        self.max_delay = max_delay
        self.jitter = jitter

        self.online = True
        self.retry_count = 0
        self.last_error: Optional[str] = None
        self._healthy = True
        self._scheduler: Optional[AsyncIOScheduler] = None
        # One check at a time: the interval job and manual checks share retry_count
        self._lock = asyncio.Lock()

    @property
    def is_healthy(self) -> bool:
        return self._healthy

    def get_retry_delay(self, attempt: int) -> float:
        """Exponential backoff with up to one second of jitter, capped"""
        return min(self.initial_delay * 2 ** attempt + self.jitter(), self.max_delay)

    async def check_health(self) -> bool:
        async with self._lock:
            return await self._run_check()

    async def _run_check(self) -> bool:
        while True:
            if not self.online:
                logger.warning("📴 No network connectivity, will check again when it is restored")
                self._healthy = False
                return False

            try:
                await self.probe()
            except Exception as e:
                self.last_error = str(e)
                logger.error(
                    f"❌ Connection error at {utcnow().isoformat()}: {e} "
                    f"(attempt {self.retry_count + 1}, network {'online' if self.online else 'offline'})"
                )
                if self.retry_count < self.max_retries:
                    self.retry_count += 1
                    delay = self.get_retry_delay(self.retry_count)
                    logger.info(f"🔄 Retrying connection (attempt {self.retry_count}/{self.max_retries}) in {delay:.1f}s...")
                    await asyncio.sleep(delay)
                    continue

                self._healthy = False
                logger.error("❌ Health check failed after max retries, check the database URL and network")
                return False

            if not self._healthy:
                logger.info("✅ Connection restored")
            self._healthy = True
            self.retry_count = 0
            self.last_error = None
            return True

    async def check_connection(self) -> bool:
        """Manual trigger"""
        return await self.check_health()

    async def set_online(self) -> bool:
        logger.info("🌐 Network connection restored, checking database connection...")
        self.online = True
        async with self._lock:
            self.retry_count = 0
            return await self._run_check()

    def set_offline(self) -> None:
        logger.warning("📴 Network connection lost, database operations will be unavailable")
        self.online = False
        self._healthy = False

    # ===== LIFECYCLE =====

    async def start(self) -> None:
        if self._scheduler is not None:
            return
        self._scheduler = AsyncIOScheduler()
        self._scheduler.add_job(
            self.check_health,
            "interval",
            seconds=self.interval,
            id=JOB_ID,
            max_instances=1,
            coalesce=True,
        )
        self._scheduler.start()
        logger.info(f"🩺 Health monitor started (every {self.interval}s)")

        await self.check_health()

    async def stop(self) -> None:
        if self._scheduler is None:
            return
        self._scheduler.shutdown(wait=False)
        self._scheduler = None
        logger.info("🛑 Health monitor stopped")

    @property
    def running(self) -> bool:
        return self._scheduler is not None
