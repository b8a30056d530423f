#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
FocusFlow - HTTP Service
FastAPI application serving the calendar export and a health endpoint

Endpoints:
    POST /functions/v1/google-calendar/download   iCalendar download
    GET  /health                                   service and database status
"""

import argparse
import logging
import time
from contextlib import asynccontextmanager
from typing import Literal, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, ConfigDict, Field

from focusflow.config import Settings, get_settings
from focusflow.core.database import DataService, DatabaseError
from focusflow.core.models import ExportFormat
from focusflow.services.calendar_export import build_calendar, export_filename
from focusflow.utils.logger import setup_from_settings

logger = logging.getLogger(__name__)

EXPORT_ACTION = "download"


# ===== SCHEMAS =====

class ExportRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    format: Literal["google", "ical"] = "ical"
    user_id: Optional[str] = Field(default=None, alias="userId")


class HealthCheck(BaseModel):
    status: str
    service: str
    version: str
    database: str
    uptime: float
    timestamp: float


# ===== APPLICATION =====

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"🚀 Starting {settings.APP_NAME} HTTP service...")
        app.state.started_at = time.time()
        app.state.db = DataService(
            settings.DATABASE_URL,
            echo=settings.DB_ECHO,
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
        )
        await app.state.db.initialize()
        logger.info(f"🌐 Listening on http://{settings.DASHBOARD_HOST}:{settings.DASHBOARD_PORT}")

        yield

        logger.info("🛑 Stopping HTTP service...")
        await app.state.db.close()

    app = FastAPI(
        title=settings.APP_NAME,
        description="Habit tracking service: calendar export and health",
        version=settings.VERSION,
        docs_url="/api/docs" if settings.DEBUG else None,
        redoc_url=None,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.started_at = time.time()
    app.state.db = None

    # ===== MIDDLEWARE =====

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
    )

    @app.middleware("http")
    async def logging_middleware(request: Request, call_next):
        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time
        logger.info(f"{request.method} {request.url.path} - {response.status_code} - {process_time:.3f}s")
        response.headers["X-Process-Time"] = f"{process_time:.4f}"
        return response

    # ===== ROUTES =====

    @app.post("/functions/v1/google-calendar/{action}")
    async def google_calendar(action: str, body: Optional[ExportRequest] = None):
        """Calendar export function; ``download`` is its only action"""
        if action != EXPORT_ACTION:
            logger.warning(f"⚠️ Unknown calendar action: {action}")
            return JSONResponse(status_code=400, content={"error": "Invalid endpoint"})

        body = body or ExportRequest()
        export_format = ExportFormat(body.format)
        filename = export_filename(export_format)
        logger.info(f"📅 Calendar export ({export_format.value}) for user {body.user_id or '-'}")

        return Response(
            content=build_calendar(),
            media_type="text/calendar",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )

    @app.get("/health", response_model=HealthCheck)
    async def health(request: Request):
        db: Optional[DataService] = request.app.state.db
        database = "not_initialized"
        if db is not None:
            try:
                await db.ping()
                database = "connected"
            except DatabaseError as e:
                logger.error(f"❌ Health check: database unreachable: {e}")
                database = "unreachable"

        return HealthCheck(
            status="healthy" if database == "connected" else "degraded",
            service=settings.APP_NAME,
            version=settings.VERSION,
            database=database,
            uptime=round(time.time() - request.app.state.started_at, 3),
            timestamp=time.time(),
        )

    return app


app = create_app()


# ===== ENTRY POINT =====

def main() -> None:
    settings = get_settings()
    setup_from_settings(settings)

    parser = argparse.ArgumentParser(description=f"Run the {settings.APP_NAME} HTTP service")
    parser.add_argument("--host", default=settings.DASHBOARD_HOST, help="Bind host")
    parser.add_argument("--port", type=int, default=settings.DASHBOARD_PORT, help="Bind port")
    parser.add_argument("--reload", action="store_true", help="Reload on code changes")
    args = parser.parse_args()

    try:
        uvicorn.run(
            "focusflow.dashboard.app:app",
            host=args.host,
            port=args.port,
            reload=args.reload,
            log_level=settings.LOG_LEVEL.lower(),
            server_header=False,
        )
    except KeyboardInterrupt:
        logger.info("👋 HTTP service stopped")


if __name__ == "__main__":
    main()
