"""
User document model.

Maps to the `users` MongoDB collection, which only the local auth backend
uses. With the hosted backend, accounts live in the provider and this
collection stays empty.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from schemas.models.base import MongoBaseModel


class UserDoc(MongoBaseModel):
    """
    Document model for the `users` collection.

    status values: ACTIVE (only value currently in use)
    """

    email: str
    email_verified: bool = False
    password_hash: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    last_login_at: Optional[datetime] = None
    status: str = "ACTIVE"
