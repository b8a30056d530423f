#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
FocusFlow - Data Service
Async relational storage behind a small, user-scoped CRUD query builder

Every table is reached through ``DataService.table(name)``, which returns a
chainable ``Query``::

    rows = await db.table("goals").eq("user_id", uid).order("created_at", descending=True).fetch()
    row = await db.table("moods").insert({"user_id": uid, "mood": "happy"})
    await db.table("goal_misses").eq("goal_id", gid).eq("missed_date", day).delete()

SQLAlchemy errors never escape: they are wrapped in ``RemoteOperationError``
naming the table and the operation.
"""

import logging
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, List, Optional, TypeVar

from sqlalchemy import (
    JSON, CheckConstraint, Column, Date, DateTime, ForeignKey, Integer, MetaData,
    String, Table, Text, Time, UniqueConstraint, delete, event, func, insert, select,
    text, update,
)
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import StaticPool

from focusflow.utils.datetime_utils import utcnow

logger = logging.getLogger(__name__)

T = TypeVar("T")

# ===== EXCEPTIONS =====

class DatabaseError(Exception):
    """Base error of the data service"""
    pass


class RemoteOperationError(DatabaseError):
    """A query or write against the database failed"""

    def __init__(self, message: str, table: Optional[str] = None, operation: Optional[str] = None):
        super().__init__(message)
        self.table = table
        self.operation = operation


# ===== SCHEMA =====

def _uuid() -> str:
    return str(uuid.uuid4())


metadata = MetaData()

users = Table(
    "users", metadata,
    Column("id", String(36), primary_key=True, default=_uuid),
    Column("email", String(255), nullable=False, unique=True),
    Column("password_hash", String(255), nullable=False),
    Column("created_at", DateTime, nullable=False, default=utcnow),
)

goals = Table(
    "goals", metadata,
    Column("id", String(36), primary_key=True, default=_uuid),
    Column("user_id", String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True),
    Column("title", String(200), nullable=False),
    Column("description", Text, nullable=False, default=""),
    Column("color", String(20), nullable=False, default="#6366f1"),
    Column("frequency", JSON, nullable=False, default=list),
    Column("start_date", Date, nullable=False),
    Column("end_date", Date),
    Column("start_time", Time),
    Column("end_time", Time),
    Column("created_at", DateTime, nullable=False, default=utcnow),
)

goal_completions = Table(
    "goal_completions", metadata,
    Column("id", String(36), primary_key=True, default=_uuid),
    Column("user_id", String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True),
    Column("goal_id", String(36), ForeignKey("goals.id", ondelete="CASCADE"), nullable=False),
    Column("completed_date", Date, nullable=False),
    Column("created_at", DateTime, nullable=False, default=utcnow),
    UniqueConstraint("goal_id", "completed_date", name="uq_completion_goal_date"),
)

goal_misses = Table(
    "goal_misses", metadata,
    Column("id", String(36), primary_key=True, default=_uuid),
    Column("user_id", String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True),
    Column("goal_id", String(36), ForeignKey("goals.id", ondelete="CASCADE"), nullable=False),
    Column("missed_date", Date, nullable=False),
    Column("reason", Text, nullable=False, default=""),
    Column("improvement_plan", Text, nullable=False, default=""),
    Column("created_at", DateTime, nullable=False, default=utcnow),
    UniqueConstraint("goal_id", "missed_date", name="uq_miss_goal_date"),
)

moods = Table(
    "moods", metadata,
    Column("id", String(36), primary_key=True, default=_uuid),
    Column("user_id", String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True),
    Column("mood", String(100), nullable=False),
    Column("created_at", DateTime, nullable=False, default=utcnow, index=True),
)

hourly_energy_levels = Table(
    "hourly_energy_levels", metadata,
    Column("id", String(36), primary_key=True, default=_uuid),
    Column("user_id", String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
    Column("hour", Integer, nullable=False),
    Column("level", Integer, nullable=False),
    Column("date", Date, nullable=False),
    Column("notes", Text),
    Column("recorded_at", DateTime, nullable=False, default=utcnow),
    UniqueConstraint("user_id", "date", "hour", name="uq_energy_user_date_hour"),
    CheckConstraint("hour >= 0 AND hour <= 23", name="ck_energy_hour_range"),
)

daily_tasks = Table(
    "daily_tasks", metadata,
    Column("id", String(36), primary_key=True, default=_uuid),
    Column("user_id", String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True),
    Column("content", Text, nullable=False),
    Column("start_time", Time, nullable=False),
    Column("end_time", Time, nullable=False),
    Column("date", Date, nullable=False),
    Column("created_at", DateTime, nullable=False, default=utcnow),
)

avatars = Table(
    "avatars", metadata,
    Column("id", String(36), primary_key=True, default=_uuid),
    Column("name", String(50), nullable=False, unique=True),
    Column("emoji", String(16), nullable=False),
    Column("color", String(20), nullable=False),
)

user_profiles = Table(
    "user_profiles", metadata,
    Column("id", String(36), primary_key=True, default=_uuid),
    Column("user_id", String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True),
    Column("avatar_id", String(36), ForeignKey("avatars.id"), nullable=False),
    Column("created_at", DateTime, nullable=False, default=utcnow),
)

AVATAR_CATALOG = [
    {"name": "Bear", "emoji": "🐻", "color": "#92400e"},
    {"name": "Cat", "emoji": "🐱", "color": "#f59e0b"},
    {"name": "Fox", "emoji": "🦊", "color": "#f97316"},
    {"name": "Koala", "emoji": "🐨", "color": "#6b7280"},
    {"name": "Owl", "emoji": "🦉", "color": "#8b5cf6"},
    {"name": "Panda", "emoji": "🐼", "color": "#111827"},
    {"name": "Rabbit", "emoji": "🐰", "color": "#ec4899"},
    {"name": "Tiger", "emoji": "🐯", "color": "#ea580c"},
]


# ===== HELPER CLASSES =====

@dataclass
class DatabaseStats:
    """Operation counters"""
    queries: int = 0
    writes: int = 0
    errors: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "queries": self.queries,
            "writes": self.writes,
            "errors": self.errors,
        }


class Query:
    """Filters, ordering and limit for one table, finished by a terminal call"""

    def __init__(self, service: "DataService", table: Table):
        self._service = service
        self._table = table
        self._filters = []
        self._order = []
        self._limit: Optional[int] = None

    def _column(self, name: str):
        try:
            return self._table.c[name]
        except KeyError:
            raise RemoteOperationError(
                f"Unknown column '{name}' on '{self._table.name}'",
                table=self._table.name,
                operation="filter",
            )

    # ----- modifiers -----

    def eq(self, column: str, value: Any) -> "Query":
        self._filters.append(self._column(column) == value)
        return self

    def gte(self, column: str, value: Any) -> "Query":
        self._filters.append(self._column(column) >= value)
        return self

    def gt(self, column: str, value: Any) -> "Query":
        self._filters.append(self._column(column) > value)
        return self

    def lte(self, column: str, value: Any) -> "Query":
        self._filters.append(self._column(column) <= value)
        return self

    def lt(self, column: str, value: Any) -> "Query":
        self._filters.append(self._column(column) < value)
        return self

    def in_(self, column: str, values: List[Any]) -> "Query":
        self._filters.append(self._column(column).in_(list(values)))
        return self

    def order(self, column: str, descending: bool = False) -> "Query":
        col = self._column(column)
        self._order.append(col.desc() if descending else col.asc())
        return self

    def limit(self, count: int) -> "Query":
        self._limit = count
        return self

    # ----- terminals -----

    def _select(self):
        stmt = select(self._table)
        for condition in self._filters:
            stmt = stmt.where(condition)
        if self._order:
            stmt = stmt.order_by(*self._order)
        if self._limit is not None:
            stmt = stmt.limit(self._limit)
        return stmt

    async def fetch(self) -> List[Dict[str, Any]]:
        async def operation(conn):
            result = await conn.execute(self._select())
            return [dict(row._mapping) for row in result]

        return await self._service._run(self._table.name, "select", operation)

    async def fetch_one(self) -> Optional[Dict[str, Any]]:
        """First matching row or None"""
        if self._limit is None:
            self._limit = 1
        rows = await self.fetch()
        return rows[0] if rows else None

    async def count(self) -> int:
        async def operation(conn):
            stmt = select(func.count()).select_from(self._table)
            for condition in self._filters:
                stmt = stmt.where(condition)
            return (await conn.execute(stmt)).scalar_one()

        return await self._service._run(self._table.name, "count", operation)

    async def insert(self, values: Dict[str, Any]) -> Dict[str, Any]:
        """Insert one row and return it as stored"""
        values = dict(values)
        if "id" in self._table.c and not values.get("id"):
            values["id"] = _uuid()

        async def operation(conn):
            await conn.execute(insert(self._table).values(**values))
            result = await conn.execute(select(self._table).where(self._table.c.id == values["id"]))
            return dict(result.one()._mapping)

        return await self._service._run(self._table.name, "insert", operation, write=True)

    async def update(self, values: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Update matching rows and return them after the update"""
        async def operation(conn):
            id_stmt = select(self._table.c.id)
            for condition in self._filters:
                id_stmt = id_stmt.where(condition)
            ids = [row[0] for row in await conn.execute(id_stmt)]
            if not ids:
                return []
            await conn.execute(update(self._table).where(self._table.c.id.in_(ids)).values(**values))
            result = await conn.execute(select(self._table).where(self._table.c.id.in_(ids)))
            return [dict(row._mapping) for row in result]

        return await self._service._run(self._table.name, "update", operation, write=True)

    async def delete(self) -> int:
        """Delete matching rows, return how many were removed"""
        async def operation(conn):
            stmt = delete(self._table)
            for condition in self._filters:
                stmt = stmt.where(condition)
            result = await conn.execute(stmt)
            return result.rowcount

        return await self._service._run(self._table.name, "delete", operation, write=True)


# ===== DATA SERVICE =====

class DataService:
    """Async engine owner and entry point for table queries"""

    def __init__(self, database_url: str, echo: bool = False, pool_size: int = 5, max_overflow: int = 10):
        self.database_url = database_url
        self.stats = DatabaseStats()
        self.engine: AsyncEngine = self._create_engine(echo, pool_size, max_overflow)

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    def _create_engine(self, echo: bool, pool_size: int, max_overflow: int) -> AsyncEngine:
        if not self.is_sqlite:
            return create_async_engine(
                self.database_url,
                echo=echo,
                pool_size=pool_size,
                max_overflow=max_overflow,
            )

        kwargs: Dict[str, Any] = {"echo": echo}
        if ":memory:" in self.database_url or self.database_url.rstrip("/").endswith("sqlite+aiosqlite:"):
            # One shared connection, otherwise every checkout sees an empty database
            kwargs["poolclass"] = StaticPool
            kwargs["connect_args"] = {"check_same_thread": False}
        else:
            db_path = self.database_url.split("///", 1)[-1]
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)

        engine = create_async_engine(self.database_url, **kwargs)

        @event.listens_for(engine.sync_engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return engine

    async def initialize(self) -> None:
        """Create tables and seed the avatar catalog"""
        logger.info(f"🔄 Initializing database ({self.engine.url.get_backend_name()})...")
        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(metadata.create_all)
        except SQLAlchemyError as e:
            self.stats.errors += 1
            raise RemoteOperationError(f"Failed to create schema: {e}", operation="create_all") from e

        if await self.table("avatars").count() == 0:
            for avatar in AVATAR_CATALOG:
                await self.table("avatars").insert(avatar)
            logger.info(f"🎭 Seeded {len(AVATAR_CATALOG)} avatars")
        logger.info("✅ Database ready")

    async def close(self) -> None:
        await self.engine.dispose()
        logger.info("🧹 Database connections closed")

    def table(self, name: str) -> Query:
        try:
            return Query(self, metadata.tables[name])
        except KeyError:
            raise RemoteOperationError(f"Unknown table '{name}'", table=name, operation="table")

    async def ping(self) -> None:
        """Round-trip to the database; raises when it is unreachable"""
        async def operation(conn):
            await conn.execute(text("SELECT 1"))

        await self._run("-", "ping", operation)

    async def _run(
        self,
        table: str,
        operation: str,
        func_: Callable[[Any], Awaitable[T]],
        write: bool = False,
    ) -> T:
        if write:
            self.stats.writes += 1
        else:
            self.stats.queries += 1
        try:
            async with self.engine.begin() as conn:
                return await func_(conn)
        except SQLAlchemyError as e:
            self.stats.errors += 1
            logger.debug(f"Database error on {table}.{operation}: {e}")
            raise RemoteOperationError(
                f"{operation} on {table} failed: {e.__class__.__name__}: {e.orig if getattr(e, 'orig', None) else e}",
                table=table,
                operation=operation,
            ) from e
