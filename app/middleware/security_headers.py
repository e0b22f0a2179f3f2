"""
Security Headers Middleware - adds hardening headers to every response.

The API only returns JSON (plus the proxied Maps script), so the policy is
deny-by-default. HSTS is only sent when HTTPS is enforced (production).

Usage:
    app.add_middleware(SecurityHeadersMiddleware, enforce_https=settings.is_production())
"""

from starlette.middleware.base import BaseHTTPMiddleware

from app.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

STATIC_HEADERS = {
    "Content-Security-Policy": "default-src 'none'; frame-ancestors 'none'; base-uri 'none'",
    "X-Frame-Options": "DENY",
    "X-Content-Type-Options": "nosniff",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Permissions-Policy": "geolocation=(), microphone=(), camera=(), payment=()",
}

HSTS_VALUE = "max-age=31536000; includeSubDomains"


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all HTTP responses."""

    def __init__(self, app, enforce_https: bool = False):
        super().__init__(app)
        self.enforce_https = enforce_https

        logger.info("Security headers middleware initialized", enforce_https=self.enforce_https)

    async def dispatch(self, request, call_next):
        response = await call_next(request)

        for name, value in STATIC_HEADERS.items():
            response.headers.setdefault(name, value)

        if self.enforce_https:
            response.headers["Strict-Transport-Security"] = HSTS_VALUE

        return response
