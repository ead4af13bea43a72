"""In-process auth event bus.

Backends publish SIGNED_IN / USER_UPDATED / SIGNED_OUT here; the app
subscribes at startup (admin sign-in logging). A failing listener is
logged and does not stop delivery to the others.
"""

from __future__ import annotations

from typing import Callable, Optional

from infrastructure.auth_backend.protocol import AuthEvent, AuthListener, AuthSession
from shared.logging import get_logger, mask_email

log = get_logger(__name__)


class AuthEventBus:
    def __init__(self) -> None:
        self._listeners: list[AuthListener] = []

    def subscribe(self, listener: AuthListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def emit(self, event: AuthEvent, session: Optional[AuthSession] = None) -> None:
        for listener in list(self._listeners):
            try:
                listener(event, session)
            except Exception as e:
                log.error(
                    "auth_listener_failed",
                    auth_event=event.value,
                    email=mask_email(session.email) if session else None,
                    error=str(e),
                    error_type=type(e).__name__,
                )

    def __len__(self) -> int:
        return len(self._listeners)
