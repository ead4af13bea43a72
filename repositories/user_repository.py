"""Local-backend account storage (`users` collection)."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from schemas.models.user import UserDoc
from repositories.base import BaseRepository


class UserRepository(BaseRepository[UserDoc]):
    model = UserDoc

    async def find_by_email(self, email: str) -> Optional[UserDoc]:
        return await self.find_one({"email": email.strip().lower()})

    async def set_password_hash(
        self, user_id, password_hash: str, now: datetime
    ) -> Optional[UserDoc]:
        return await self.update_fields(
            {"_id": user_id},
            {"password_hash": password_hash, "updated_at": now},
        )

    async def touch_login(self, user_id, now: datetime) -> None:
        await self.update_fields({"_id": user_id}, {"last_login_at": now})
