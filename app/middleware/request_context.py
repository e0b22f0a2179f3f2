"""
RequestContext Middleware - adds request tracking to all requests.

Every request gets:
- request.state.request_id: UUID for tracing, echoed as X-Request-ID
- request.state.ip_address: client IP (X-Forwarded-For only from trusted proxies)

Both are bound into structlog's context vars, so every log line written
while handling the request carries them.
"""

import uuid

import structlog
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from app.config import settings
from app.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Attach a request id and client IP to the request and log context."""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        ip_address = self._extract_client_ip(request)

        request.state.request_id = request_id
        request.state.ip_address = ip_address

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id, ip_address=ip_address)

        logger.debug("Request started", method=request.method, path=request.url.path)

        try:
            response = await call_next(request)
        finally:
            structlog.contextvars.clear_contextvars()

        response.headers["X-Request-ID"] = request_id
        return response

    def _extract_client_ip(self, request: Request) -> str | None:
        """
        Client IP with proxy spoofing protection.

        X-Forwarded-For is only honoured when TRUST_X_FORWARDED_FOR is on and
        the direct peer is one of TRUSTED_PROXY_IPS.
        """
        direct_ip = request.client.host if request.client else None

        if not settings.TRUST_X_FORWARDED_FOR or direct_ip not in settings.TRUSTED_PROXY_IPS:
            return direct_ip

        forwarded_for = request.headers.get("x-forwarded-for")
        if forwarded_for:
            # "client, proxy1, proxy2" - first entry is the original client
            return forwarded_for.split(",")[0].strip()

        return direct_ip
