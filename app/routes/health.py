"""
Health check endpoints for the quote backend.
"""

import time

from fastapi import APIRouter, Depends, Request

from app.config import settings
from app.repositories.quote_repository import RowStore
from app.services.quote import row_codec

router = APIRouter(tags=["health"])


def get_row_store(request: Request) -> RowStore | None:
    """Row store built at startup, None when Sheets is not configured."""
    return getattr(request.app.state, "row_store", None)


@router.get("/healthz")
async def healthz():
    """Basic health check - always returns 200 if app is running."""
    return {"status": "ok", "service": "moving-quote-backend"}


@router.get("/readyz")
async def readyz(store: RowStore | None = Depends(get_row_store)):
    """
    Readiness check: the sheet header is readable and mail is configured.
    """
    checks = {}
    overall_ok = True

    # 1) Sheet access
    t0 = time.time()
    if store is None:
        checks["sheets"] = {"ok": False, "error": "GOOGLE_SHEET_ID not set"}
        overall_ok = False
    else:
        try:
            header = await store.get_rows(row_codec.header_range(settings.GOOGLE_SHEET_NAME))
            columns = len(header[0]) if header else 0
            checks["sheets"] = {
                "ok": True,
                "latency_ms": round((time.time() - t0) * 1000, 1),
                "header_columns": columns,
                "expected_columns": len(row_codec.SHEET_COLUMNS),
                "schema_version": row_codec.SCHEMA_VERSION,
            }
        except Exception as e:
            checks["sheets"] = {
                "ok": False,
                "error": f"{type(e).__name__}: {e}",
                "latency_ms": round((time.time() - t0) * 1000, 1),
            }
            overall_ok = False

    # 2) Configuration checks
    config_issues = []

    if not settings.mail_configured():
        config_issues.append("ZEPTO_TOKEN or SENDER_EMAIL not set")

    if not settings.OWNER_EMAIL:
        config_issues.append("OWNER_EMAIL not set")

    if not settings.allowed_origins():
        config_issues.append("FRONTEND_URL not set")

    # Email is best-effort, so missing mail settings do not fail readiness
    checks["configuration"] = {
        "ok": not config_issues,
        "issues": config_issues if config_issues else None,
        "environment": settings.environment,
    }

    return {"overall_ok": overall_ok, "checks": checks, "timestamp": time.time()}
