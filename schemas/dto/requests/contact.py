"""Request DTO for POST /contact."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ContactRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(min_length=1, max_length=200)
    email: str = Field(min_length=3, max_length=320)
    service: str = ""
    business: str = ""
    message: str = Field(min_length=1, max_length=4000)
