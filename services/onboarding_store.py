"""
Per-user onboarding data kept in the key-value store.

``businessFormData`` carries the submitted intake (and later the chosen
package) from the formation wizard to the pricing step. ``dashboardData``
is written once a package is chosen; its presence is what marks
onboarding as complete.
"""

from __future__ import annotations

import json
from typing import Any, Optional

from infrastructure.storage.namespaced import NamespacedStore
from infrastructure.storage.protocol import KeyValueStore
from shared.export_utils import to_json
from shared.logging import get_logger

log = get_logger(__name__)

BUSINESS_FORM_KEY = "businessFormData"
DASHBOARD_KEY = "dashboardData"


class OnboardingStore:
    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    def _for(self, user_id: str) -> NamespacedStore:
        return NamespacedStore(self._store, f"user:{user_id}")

    async def _load(self, user_id: str, key: str) -> Optional[dict[str, Any]]:
        raw = await self._for(user_id).get(key)
        if raw is None:
            return None
        try:
            data = json.loads(raw)
        except ValueError:
            log.warning("onboarding_data_unreadable", key=key, user_id=user_id)
            return None
        return data if isinstance(data, dict) else None

    async def load_business_form(self, user_id: str) -> Optional[dict[str, Any]]:
        return await self._load(user_id, BUSINESS_FORM_KEY)

    async def save_business_form(self, user_id: str, data: dict[str, Any]) -> None:
        await self._for(user_id).set(BUSINESS_FORM_KEY, to_json(data))

    async def load_dashboard(self, user_id: str) -> Optional[dict[str, Any]]:
        return await self._load(user_id, DASHBOARD_KEY)

    async def save_dashboard(self, user_id: str, data: dict[str, Any]) -> None:
        await self._for(user_id).set(DASHBOARD_KEY, to_json(data))

    async def is_onboarding_complete(self, user_id: str) -> bool:
        return await self.load_dashboard(user_id) is not None
