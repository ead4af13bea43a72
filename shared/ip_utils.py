"""
Client identification for FastAPI requests.

The login rate limiter keys its persisted counters per client. Browsers
send a stable ``X-Client-Id`` (generated once and kept in local storage);
anything else is keyed by its resolved IP address.
"""

from __future__ import annotations

import re

from fastapi import Request

CLIENT_ID_HEADER = "X-Client-Id"

_PROXY_HEADERS: tuple[str, ...] = (
    "CF-Connecting-IP",
    "True-Client-IP",
    "X-Forwarded-For",
    "X-Real-IP",
)

_CLIENT_ID_RE = re.compile(r"^[A-Za-z0-9_\-]{8,128}$")


def get_client_ip(request: Request) -> str:
    """Extract the real client IP, honouring common proxy headers.

    The first address of a comma-separated header value wins; without any
    proxy header the direct connection address is used (``""`` if unknown).
    """
    for header in _PROXY_HEADERS:
        ip_value: str | None = request.headers.get(header)
        if ip_value:
            client_ip = ip_value.split(",")[0].strip()
            if client_ip:
                return client_ip

    return request.client.host if request.client else ""


def get_client_key(request: Request) -> str:
    """Return the rate-limit key for the caller.

    ``client:<id>`` when a well-formed ``X-Client-Id`` header is present,
    otherwise ``ip:<address>``.
    """
    client_id = (request.headers.get(CLIENT_ID_HEADER) or "").strip()
    if client_id and _CLIENT_ID_RE.match(client_id):
        return f"client:{client_id}"
    return f"ip:{get_client_ip(request) or 'unknown'}"
