"""
CORS Middleware - lets the quote form's site call the API with cookies.

The session cookie travels cross-site, so only origins on the allow-list
get Access-Control-Allow-Origin and Access-Control-Allow-Credentials.
Requests without an Origin header (curl, server-to-server) pass through.

Usage:
    app.add_middleware(
        CORSMiddleware,
        allowed_origins=settings.allowed_origins(),
    )
"""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse, Response

from app.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


class CORSMiddleware(BaseHTTPMiddleware):
    """Allow-list CORS with credentials and preflight handling."""

    def __init__(
        self,
        app,
        allowed_origins: list[str] | None = None,
        allow_credentials: bool = True,
        allow_methods: list[str] | None = None,
        allow_headers: list[str] | None = None,
        max_age: int = 600,
    ):
        """
        Args:
            app: FastAPI application
            allowed_origins: Exact origins allowed (e.g. ["https://shiftraa.com"])
            allow_credentials: Whether browsers may send the session cookie
            allow_methods: Allowed HTTP methods
            allow_headers: Allowed request headers
            max_age: Seconds browsers may cache a preflight answer
        """
        super().__init__(app)
        self.allowed_origins = allowed_origins or []
        self.allow_credentials = allow_credentials
        self.allow_methods = allow_methods or ["GET", "POST", "OPTIONS"]
        self.allow_headers = allow_headers or [
            "Accept",
            "Content-Type",
            "X-Request-ID",
            "X-Requested-With",
        ]
        self.max_age = max_age

        logger.info(
            "CORS middleware initialized",
            allowed_origins=self.allowed_origins,
            allow_credentials=self.allow_credentials,
        )

    def is_allowed(self, origin: str | None) -> bool:
        return bool(origin) and origin.rstrip("/") in self.allowed_origins

    async def dispatch(self, request, call_next):
        origin = request.headers.get("origin")
        allowed = self.is_allowed(origin)

        if request.method == "OPTIONS" and origin:
            if allowed:
                return self._preflight_response(origin)
            logger.warning("CORS preflight rejected - origin not allowed", origin=origin)
            return Response(status_code=403, content="Not allowed by CORS")

        if origin and not allowed:
            logger.warning("CORS request from disallowed origin", origin=origin, path=request.url.path)
            return JSONResponse(status_code=403, content={"message": "Not allowed by CORS"})

        response = await call_next(request)

        if allowed:
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Vary"] = "Origin"
            if self.allow_credentials:
                response.headers["Access-Control-Allow-Credentials"] = "true"

        return response

    def _preflight_response(self, origin: str) -> Response:
        headers = {
            "Access-Control-Allow-Origin": origin,
            "Access-Control-Allow-Methods": ", ".join(self.allow_methods),
            "Access-Control-Allow-Headers": ", ".join(self.allow_headers),
            "Access-Control-Max-Age": str(self.max_age),
            "Vary": "Origin",
        }

        if self.allow_credentials:
            headers["Access-Control-Allow-Credentials"] = "true"

        logger.debug("CORS preflight request handled", origin=origin)
        return Response(status_code=204, headers=headers)
