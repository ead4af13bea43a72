"""Collection names and index setup, run once from the app lifespan."""

from __future__ import annotations

from pymongo import ASCENDING, DESCENDING
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import PyMongoError

from shared.logging import get_logger

log = get_logger(__name__)

USERS = "users"
USER_PROFILES = "user_profiles"
TEAM_MEMBERS = "team_members"
BUSINESS_PROFILES = "business_profiles"
APPLICATIONS = "applications"
ORDERS = "orders"


async def ensure_indexes(db: AsyncDatabase) -> None:
    try:
        await db[USERS].create_index([("email", ASCENDING)], unique=True)

        await db[USER_PROFILES].create_index([("user_id", ASCENDING)], unique=True)

        await db[TEAM_MEMBERS].create_index(
            [("user_id", ASCENDING), ("created_at", DESCENDING)]
        )

        await db[BUSINESS_PROFILES].create_index(
            [("user_id", ASCENDING), ("created_at", DESCENDING)]
        )
        await db[BUSINESS_PROFILES].create_index([("status", ASCENDING)])

        await db[APPLICATIONS].create_index([("business_email", ASCENDING)], unique=True)
        await db[APPLICATIONS].create_index([("owner_email", ASCENDING)], unique=True)
        await db[APPLICATIONS].create_index([("user_id", ASCENDING)])

        await db[ORDERS].create_index([("user_id", ASCENDING), ("created_at", DESCENDING)])
    except PyMongoError as e:
        # Not fatal: the formation service also checks for duplicate emails
        log.error("ensure_indexes_failed", error=str(e), error_type=type(e).__name__)
