#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
FocusFlow - Auth Store
Signed-in user state on top of the authentication service
"""

import logging
from typing import Optional

from focusflow.core.auth import AuthService
from focusflow.core.models import User
from focusflow.services.local_storage import CHAT_KEYS, LocalStorage

logger = logging.getLogger(__name__)


class AuthStore:

    def __init__(self, auth: AuthService, local_storage: Optional[LocalStorage] = None):
        self.auth = auth
        self.local_storage = local_storage
        self.user: Optional[User] = None

    def set_user(self, user: Optional[User]) -> None:
        self.user = user

    async def sign_in(self, email: str, password: str) -> User:
        session = await self.auth.sign_in(email, password)
        self.user = session.user
        return self.user

    async def sign_up(self, email: str, password: str) -> User:
        session = await self.auth.sign_up(email, password)
        self.user = session.user
        return self.user

    async def sign_out(self) -> None:
        """End the session and forget the chat transcript kept on this machine"""
        await self.auth.sign_out()

        if self.local_storage is not None:
            try:
                self.local_storage.remove_item(*CHAT_KEYS)
            except (OSError, ValueError) as e:
                logger.error(f"❌ Failed to clear chat history on logout: {e}")

        self.user = None
