"""User profiles and team members for the client dashboard."""

from __future__ import annotations

from typing import Optional

from schemas.models.profile import TeamMemberDoc, UserProfileDoc
from repositories.base import BaseRepository


class UserProfileRepository(BaseRepository[UserProfileDoc]):
    model = UserProfileDoc

    async def find_by_user(self, user_id: str) -> Optional[UserProfileDoc]:
        return await self.find_one({"user_id": user_id})


class TeamMemberRepository(BaseRepository[TeamMemberDoc]):
    model = TeamMemberDoc

    async def list_for_user(self, user_id: str) -> list[TeamMemberDoc]:
        return await self.find_many({"user_id": user_id})
