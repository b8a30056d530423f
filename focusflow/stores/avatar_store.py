#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
FocusFlow - Avatar Store
Avatar catalog and the user's profile
"""

import logging
from typing import Any, Dict, List, Optional

from focusflow.core.database import RemoteOperationError
from focusflow.core.models import Avatar, UserProfile
from focusflow.stores.base import BaseStore

logger = logging.getLogger(__name__)


class AvatarStore(BaseStore):

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.avatars: List[Avatar] = []
        self.user_profile: Optional[UserProfile] = None

    async def fetch_avatars(self) -> List[Avatar]:
        self._begin(fetch=True)
        try:
            rows = await self._retry(lambda: self.db.table("avatars").order("name").fetch())
        except Exception as e:
            self.avatars = []
            self._fail("fetch avatars", e, fetch=True)
            raise

        self.avatars = [Avatar.from_row(row) for row in rows]
        self._succeed(fetch=True)
        return self.avatars

    async def _with_avatar(self, row: Dict[str, Any]) -> UserProfile:
        profile = UserProfile.from_row(row)
        avatar = await self._retry(lambda: self.db.table("avatars").eq("id", profile.avatar_id).fetch_one())
        profile.avatar = Avatar.from_row(avatar) if avatar else None
        return profile

    async def fetch_user_profile(self) -> UserProfile:
        """Profile with its avatar; a missing profile is created with the first avatar"""
        self._begin(fetch=True)
        try:
            user_id = await self._user_id()
            row = await self._retry(lambda: self.db.table("user_profiles").eq("user_id", user_id).fetch_one())

            if row is None:
                first = await self._retry(lambda: self.db.table("avatars").order("name").fetch_one())
                if first is None:
                    raise RemoteOperationError("No avatars available", table="avatars", operation="select")
                row = await self.db.table("user_profiles").insert({
                    "user_id": user_id,
                    "avatar_id": first["id"],
                })
                logger.info(f"🎭 Profile created with avatar {first['name']}")

            profile = await self._with_avatar(row)
        except Exception as e:
            self.user_profile = None
            self._fail("fetch user profile", e, fetch=True)
            raise

        self.user_profile = profile
        self._succeed(fetch=True)
        return profile

    async def set_user_avatar(self, avatar_id: str) -> UserProfile:
        self._begin()
        try:
            user_id = await self._user_id()
            rows = await self._retry(
                lambda: self.db.table("user_profiles").eq("user_id", user_id).update({"avatar_id": avatar_id})
            )
            if not rows:
                raise RemoteOperationError("Profile not found", table="user_profiles", operation="update")
            profile = await self._with_avatar(rows[0])
        except Exception as e:
            self._fail("update avatar", e)
            raise

        self.user_profile = profile
        return profile
