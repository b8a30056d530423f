#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
FocusFlow - Store Base
Shared state handling for the domain stores

A store keeps the latest slice of one or two tables in memory. Fetches
replace the slice (or empty it on failure); mutations write remotely first
and only then derive the new slice with a reducer from ``reducers``. Every
failure is recorded in ``error`` and re-raised for the caller.
"""

import logging
from enum import Enum
from typing import Awaitable, Callable, Optional, TypeVar

from focusflow.core.auth import AuthService
from focusflow.core.database import DataService
from focusflow.utils.datetime_utils import today_local
from focusflow.utils.decorators import INITIAL_RETRY_DELAY, MAX_RETRIES, retry_with_backoff

logger = logging.getLogger(__name__)

T = TypeVar("T")


class StoreStatus(Enum):
    """idle -> loading -> ready | errored; ready and errored go back to loading on the next fetch"""
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    ERRORED = "errored"


class BaseStore:
    """Status, error slot and remote helpers shared by all stores"""

    def __init__(
        self,
        db: DataService,
        auth: AuthService,
        retries: int = MAX_RETRIES,
        retry_delay: float = INITIAL_RETRY_DELAY,
        tz_name: str = "UTC",
    ):
        self.db = db
        self.auth = auth
        self.retries = retries
        self.retry_delay = retry_delay
        self.tz_name = tz_name
        self.status = StoreStatus.IDLE
        self.error: Optional[str] = None

    @property
    def loading(self) -> bool:
        return self.status is StoreStatus.LOADING

    def clear_error(self) -> None:
        self.error = None

    def today(self):
        return today_local(self.tz_name)

    async def _user_id(self) -> str:
        user = await self.auth.require_user()
        return user.id

    async def _retry(self, operation: Callable[[], Awaitable[T]]) -> T:
        return await retry_with_backoff(operation, retries=self.retries, delay=self.retry_delay)

    # ===== STATE TRANSITIONS =====

    def _begin(self, fetch: bool = False) -> None:
        self.error = None
        if fetch:
            self.status = StoreStatus.LOADING

    def _succeed(self, fetch: bool = False) -> None:
        if fetch:
            self.status = StoreStatus.READY

    def _fail(self, action: str, exc: Exception, fetch: bool = False) -> None:
        self.error = f"Failed to {action}: {exc}"
        if fetch:
            self.status = StoreStatus.ERRORED
        logger.error(f"❌ {self.__class__.__name__} failed to {action}: {exc}")
