"""
Quote submission routes.
HTTP endpoint for the two-part moving-quote form.
"""

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from app.config import settings
from app.infrastructure.observability.logging import get_logger
from app.models.api.quote_request import parse_submission
from app.models.api.quote_response import QuoteErrorResponse, SubmitQuoteResponse
from app.services.quote.errors import StoreUnavailable, SubmissionValidationError
from app.services.quote.submission_service import (
    QuoteSubmissionService,
    SubmissionResult,
    TokenAction,
)

logger = get_logger(__name__)

router = APIRouter(tags=["quote"])


def get_submission_service(request: Request) -> QuoteSubmissionService:
    """Submission service built at startup (see app.main lifespan)."""
    return request.app.state.submission_service


def _cookie_options() -> dict:
    return {
        "httponly": True,
        "secure": settings.is_production(),
        # The form is served from another site in production
        "samesite": "none" if settings.is_production() else "lax",
    }


def _apply_session_cookie(response: JSONResponse, result: SubmissionResult) -> None:
    if result.token_action is TokenAction.ISSUE:
        logger.info("Setting session cookie", session_id=result.session_id)
        response.set_cookie(
            settings.SESSION_COOKIE_NAME,
            result.session_id,
            max_age=settings.SESSION_COOKIE_MAX_AGE,
            **_cookie_options(),
        )
    else:
        logger.info("Clearing session cookie", session_id=result.session_id)
        response.delete_cookie(settings.SESSION_COOKIE_NAME, **_cookie_options())


def _error(status_code: int, message: str, error: str | None = None) -> JSONResponse:
    body = QuoteErrorResponse(message=message, error=error)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


@router.post(
    "/submit-quote",
    response_model=SubmitQuoteResponse,
    responses={400: {"model": QuoteErrorResponse}, 500: {"model": QuoteErrorResponse}},
)
async def submit_quote(
    request: Request,
    service: QuoteSubmissionService = Depends(get_submission_service),
):
    """Store part 1 or part 2 of a quote request."""
    try:
        body = await request.json()
    except ValueError:
        logger.warning("Submission body is not valid JSON")
        return _error(status.HTTP_400_BAD_REQUEST, "Request body must be valid JSON")

    try:
        submission = parse_submission(body)
    except SubmissionValidationError as e:
        logger.warning("Rejected quote submission", reason=str(e))
        return _error(status.HTTP_400_BAD_REQUEST, str(e))

    session_token = request.cookies.get(settings.SESSION_COOKIE_NAME)

    try:
        result = await service.submit(submission, session_token)
    except StoreUnavailable as e:
        logger.error("Quote store unavailable", part=submission.part, operation=e.operation, error=str(e))
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Error submitting quote", str(e))
    except Exception as e:
        logger.error("Error processing submission", part=submission.part, error=str(e))
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Error submitting quote", str(e))

    body = SubmitQuoteResponse(uuid=result.session_id, message=result.message)
    response = JSONResponse(status_code=status.HTTP_200_OK, content=body.model_dump())
    _apply_session_cookie(response, result)
    return response
