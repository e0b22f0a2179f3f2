"""
Moving-quote backend entry point.

Builds the Sheets row store, the mail sender and the submission service at
startup and owns their lifecycle; routes receive them through app.state.
"""

import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request

from app.config import settings
from app.infrastructure.observability.logging import get_logger, log_request, setup_logging
from app.middleware import CORSMiddleware, RequestContextMiddleware, SecurityHeadersMiddleware
from app.repositories.quote_repository import QuoteRowRepository
from app.routes import health, maps, quote
from app.services.google_sheets_service import GoogleSheetsService, ServiceAccountCredentials
from app.services.quote.notifications import QuoteNotifier
from app.services.quote.submission_service import QuoteSubmissionService
from app.services.zeptomail_service import ZeptoMailService

# Setup logging before creating the app
setup_logging(log_level=settings.LOG_LEVEL)
logger = get_logger(__name__)


def build_sheets_service() -> GoogleSheetsService | None:
    if not settings.sheets_configured():
        logger.warning("GOOGLE_SHEET_ID not set, submissions will fail")
        return None

    credentials = ServiceAccountCredentials.from_file(settings.GOOGLE_SERVICE_ACCOUNT_FILE)
    return GoogleSheetsService(settings.GOOGLE_SHEET_ID, settings.GOOGLE_SHEET_NAME, credentials)


def build_mail_sender() -> ZeptoMailService | None:
    if not settings.mail_configured():
        logger.warning("ZeptoMail not configured, notification emails disabled")
        return None

    return ZeptoMailService(
        settings.ZEPTO_URL,
        settings.ZEPTO_TOKEN,
        settings.SENDER_EMAIL,
        settings.SENDER_NAME,
    )


class UnconfiguredRowStore:
    """Row store stand-in when no spreadsheet is configured; every call fails."""

    async def get_rows(self, range_a1: str) -> list[list[str]]:
        raise RuntimeError("GOOGLE_SHEET_ID not set")

    async def insert_row_at_top(self, values: list[str]) -> None:
        raise RuntimeError("GOOGLE_SHEET_ID not set")

    async def update_row(self, position: int, values: list[str]) -> None:
        raise RuntimeError("GOOGLE_SHEET_ID not set")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create external clients on startup and close them on shutdown."""
    logger.info("Application starting", environment=settings.environment, debug=settings.debug)

    sheets = build_sheets_service()
    mailer = build_mail_sender()

    repository = QuoteRowRepository(sheets or UnconfiguredRowStore(), settings.GOOGLE_SHEET_NAME)
    notifier = QuoteNotifier(mailer, settings.OWNER_EMAIL, settings.SENDER_EMAIL)

    app.state.row_store = sheets
    app.state.submission_service = QuoteSubmissionService(repository, notifier)

    logger.info(
        "Services initialized",
        sheets=sheets is not None,
        mail=mailer is not None,
        sheet_name=settings.GOOGLE_SHEET_NAME,
    )

    yield

    logger.info("Application shutting down")

    for name, client in (("sheets", sheets), ("mail", mailer)):
        if client is None:
            continue
        try:
            await client.close()
        except Exception as e:
            logger.error("Error closing client", client=name, error=str(e))


app = FastAPI(
    title="Shiftraa Moving Quote API",
    description="Two-part moving-quote form backed by Google Sheets",
    version="0.1.0",
    lifespan=lifespan,
)

# Include routers
app.include_router(health.router)
app.include_router(quote.router)
app.include_router(maps.router)

# Last added runs first: CORS answers preflights before anything else
app.add_middleware(SecurityHeadersMiddleware, enforce_https=settings.is_production())
app.add_middleware(RequestContextMiddleware)
app.add_middleware(CORSMiddleware, allowed_origins=settings.allowed_origins())


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log HTTP requests with timing."""
    start_time = time.time()
    response = await call_next(request)
    process_time = (time.time() - start_time) * 1000

    log_request(
        method=request.method,
        path=request.url.path,
        status_code=response.status_code,
        duration_ms=round(process_time, 2),
        request_id=response.headers.get("X-Request-ID"),
    )
    return response


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=settings.PORT)
