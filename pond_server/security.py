"""Response hardening and per-IP WebSocket limits."""

import os
from collections import Counter
from collections.abc import Iterable
from typing import Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Cache-Control": "no-store",
}


def ip_whitelist_from_env() -> frozenset[str]:
    """Addresses exempt from the connection limit (``IP_WHITELIST``, comma separated)."""
    raw = os.getenv("IP_WHITELIST", "127.0.0.1,::1")
    return frozenset(ip.strip() for ip in raw.split(",") if ip.strip())


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add ``SECURITY_HEADERS`` to every HTTP response."""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response


def setup_security_middleware(app) -> None:
    app.add_middleware(SecurityHeadersMiddleware)


def client_ip_from_headers(headers, client) -> str:
    """Best guess at the renderer's address, honouring reverse-proxy headers."""
    forwarded_for = headers.get("x-forwarded-for")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    return headers.get("x-real-ip") or (client.host if client else "unknown")


class WebSocketLimiter:
    """Cap concurrent renderer sockets per client address.

    Only touched from the event loop, so no locking.
    """

    def __init__(self, max_connections_per_ip: int = 5, whitelist: Optional[Iterable[str]] = None):
        self.max_connections = max_connections_per_ip
        self.whitelist = frozenset(whitelist) if whitelist is not None else ip_whitelist_from_env()
        self._open: Counter[str] = Counter()

    def connections(self, client_ip: str) -> int:
        return self._open[client_ip]

    def can_connect(self, client_ip: str) -> bool:
        return client_ip in self.whitelist or self._open[client_ip] < self.max_connections

    def connect(self, client_ip: str) -> bool:
        """Reserve a slot for ``client_ip``; False if it already has too many."""
        if not self.can_connect(client_ip):
            return False
        self._open[client_ip] += 1
        return True

    def disconnect(self, client_ip: str) -> None:
        if self._open[client_ip] > 0:
            self._open[client_ip] -= 1
        if not self._open[client_ip]:
            self._open.pop(client_ip, None)
