#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
FocusFlow - Calendar Export Store
Downloads the user's calendar from the export endpoint
"""

import logging
import webbrowser
from pathlib import Path
from typing import Callable, Optional, Union

import aiohttp

from focusflow.core.auth import AuthService
from focusflow.core.models import ExportFormat, ValidationError

logger = logging.getLogger(__name__)

GOOGLE_IMPORT_URL = "https://calendar.google.com/calendar/r/settings/export"
DEFAULT_FILENAME = "calendar.ics"


class CalendarExportError(Exception):
    """The export endpoint answered with an error"""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


def filename_from_disposition(header: Optional[str]) -> str:
    """``attachment; filename=x.ics`` -> ``x.ics``; falls back to calendar.ics"""
    if not header or "filename=" not in header:
        return DEFAULT_FILENAME
    name = header.split("filename=", 1)[1].split(";", 1)[0].strip().strip('"')
    # Never let the server pick a directory
    name = Path(name).name
    return name or DEFAULT_FILENAME


class CalendarExportStore:

    def __init__(
        self,
        auth: AuthService,
        export_url: str,
        api_key: str = "",
        download_dir: Path = Path("downloads"),
        timeout: float = 30.0,
        opener: Callable[[str], object] = webbrowser.open,
    ):
        self.auth = auth
        self.export_url = export_url
        self.api_key = api_key
        self.download_dir = Path(download_dir)
        self.timeout = timeout
        self.opener = opener
        self.downloading = False
        self.error: Optional[str] = None

    def clear_error(self) -> None:
        self.error = None

    def _headers(self):
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    async def download_calendar(self, format: Union[ExportFormat, str]) -> Union[Path, str]:
        """
        ``ical`` saves the document and returns its path; ``google`` opens
        the Google Calendar import page and returns that URL.
        """
        self.downloading = True
        self.error = None
        try:
            try:
                export_format = ExportFormat(format)
            except ValueError:
                raise ValidationError(f"Unsupported export format: {format}")

            user = await self.auth.require_user()
            payload = {"userId": user.id, "format": export_format.value}

            timeout = aiohttp.ClientTimeout(total=self.timeout)
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.post(self.export_url, json=payload, headers=self._headers()) as response:
                    if response.status >= 400:
                        text = await response.text()
                        raise CalendarExportError(text or "Failed to download calendar", status=response.status)
                    body = await response.read()
                    disposition = response.headers.get("Content-Disposition")

            if export_format is ExportFormat.GOOGLE:
                self.opener(GOOGLE_IMPORT_URL)
                logger.info("📅 Opened Google Calendar import page")
                return GOOGLE_IMPORT_URL

            self.download_dir.mkdir(parents=True, exist_ok=True)
            path = self.download_dir / filename_from_disposition(disposition)
            path.write_bytes(body)
            logger.info(f"📅 Calendar saved to {path}")
            return path
        except Exception as e:
            self.error = str(e) or "Failed to download calendar"
            logger.error(f"❌ Error downloading calendar: {e}")
            raise
        finally:
            self.downloading = False
