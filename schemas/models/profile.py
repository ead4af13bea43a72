"""
Dashboard document models.

UserProfileDoc: `user_profiles`; keyed by the auth user id (stored as
                 `user_id`, one profile per user, created lazily).
TeamMemberDoc: `team_members`; people the client adds to their business.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from schemas.models.base import MongoBaseModel


class TeamMemberStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class UserProfileDoc(MongoBaseModel):
    user_id: str
    full_name: str
    email: str
    phone: str = ""
    role: str = "Business Owner"
    profile_picture_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class TeamMemberDoc(MongoBaseModel):
    user_id: str
    name: str = "New Team Member"
    role: str = "Team Member"
    email: str = ""
    phone: str = ""
    status: TeamMemberStatus = TeamMemberStatus.ACTIVE
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
