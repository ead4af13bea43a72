"""Authenticated caller, resolved from a bearer token by dependencies.get_current_user."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class CurrentUser:
    user_id: str
    email: str
    is_admin: bool = False

    @property
    def display_name(self) -> str:
        return self.email.split("@")[0] if self.email else "User"
