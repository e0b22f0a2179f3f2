"""
Middleware components for request processing.

This package contains middleware for:
- Request context (request ID, client IP)
- Security (CORS allow-list, security headers)
"""

from app.middleware.cors import CORSMiddleware
from app.middleware.request_context import RequestContextMiddleware
from app.middleware.security_headers import SecurityHeadersMiddleware

__all__ = [
    "RequestContextMiddleware",
    "SecurityHeadersMiddleware",
    "CORSMiddleware",
]
