"""
Formation package and order models.

FormationPackage is catalogue data (see shared.packages); OrderDoc maps to
the `orders` collection and records which package a client picked for a
business profile. Payment is taken offline, so orders start `pending`.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from schemas.models.base import MongoBaseModel


class FormationPackage(BaseModel):
    name: str
    price: int  # whole US dollars
    description: str
    features: list[str]
    is_express: bool = False

    @property
    def display_price(self) -> str:
        return f"${self.price}"


class OrderDoc(MongoBaseModel):
    """Document model for the `orders` collection."""

    user_id: str
    business_profile_id: Optional[str] = None
    package_name: str
    business_type: str
    price: int
    status: str = "submitted"
    payment_status: str = "pending"
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
