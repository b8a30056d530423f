#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
FocusFlow - Authentication
Email/password accounts with a single in-process session
"""

import logging
import secrets
from datetime import timedelta
from typing import Optional

from werkzeug.security import check_password_hash, generate_password_hash

from focusflow.core.database import DataService
from focusflow.core.models import Session, User, ValidationError, validate_text
from focusflow.utils.datetime_utils import utcnow

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


class AuthError(Exception):
    """Sign-in or sign-up was rejected"""
    pass


class NotAuthenticatedError(AuthError):
    """No active session"""

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message)


class AuthService:
    """Sign-up, sign-in, sign-out and current-session lookups"""

    def __init__(self, db: DataService, session_timeout: int = 7 * 24 * 3600):
        self.db = db
        self.session_timeout = session_timeout
        self._session: Optional[Session] = None

    def _start_session(self, user: User) -> Session:
        now = utcnow()
        self._session = Session(
            access_token=secrets.token_urlsafe(32),
            user=user,
            created_at=now,
            expires_at=now + timedelta(seconds=self.session_timeout),
        )
        return self._session

    async def sign_up(self, email: str, password: str) -> Session:
        email = validate_text(email, min_length=3, max_length=255, field_name="email").lower()
        if "@" not in email:
            raise ValidationError("email must contain '@'")
        if len(password or "") < MIN_PASSWORD_LENGTH:
            raise ValidationError(f"password must be at least {MIN_PASSWORD_LENGTH} characters")

        if await self.db.table("users").eq("email", email).fetch_one():
            raise AuthError("User already registered")

        row = await self.db.table("users").insert({
            "email": email,
            "password_hash": generate_password_hash(password),
        })
        user = User.from_row(row)
        logger.info(f"👤 New user signed up: {user.email}")
        return self._start_session(user)

    async def sign_in(self, email: str, password: str) -> Session:
        row = await self.db.table("users").eq("email", (email or "").strip().lower()).fetch_one()
        if not row or not check_password_hash(row["password_hash"], password or ""):
            raise AuthError("Invalid login credentials")

        user = User.from_row(row)
        logger.info(f"🔑 User signed in: {user.email}")
        return self._start_session(user)

    async def sign_out(self) -> None:
        if self._session:
            logger.info(f"👋 User signed out: {self._session.user.email}")
        self._session = None

    async def get_session(self) -> Optional[Session]:
        """Current session, or None when signed out or expired"""
        if self._session and self._session.is_expired(utcnow()):
            logger.info("⌛ Session expired")
            self._session = None
        return self._session

    async def get_user(self) -> Optional[User]:
        session = await self.get_session()
        return session.user if session else None

    async def require_user(self) -> User:
        user = await self.get_user()
        if user is None:
            raise NotAuthenticatedError()
        return user
