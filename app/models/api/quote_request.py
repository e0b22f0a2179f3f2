"""
Quote submission request parsing.
Turns the raw JSON body into a Phase1Request or Phase2Request.
"""

from typing import Any

from pydantic import TypeAdapter, ValidationError

from app.models.domain.quote_domain import Phase1Request, Phase2Request, QuoteSubmission
from app.services.quote.errors import SubmissionValidationError

VALID_PARTS = ("1", "2")

_submission_adapter = TypeAdapter(QuoteSubmission)


def _first_error_message(error: ValidationError) -> str:
    detail = error.errors()[0]
    message = detail.get("msg", "Invalid request body")
    # Errors raised from model validators arrive as "Value error, <message>"
    message = message.removeprefix("Value error, ")
    location = ".".join(str(part) for part in detail.get("loc", ()) if part not in VALID_PARTS)
    if detail.get("type") == "value_error" or not location:
        return message
    return f"Invalid field {location}: {message}"


def parse_submission(body: Any) -> Phase1Request | Phase2Request:
    """
    Validate a submission body.

    Raises:
        SubmissionValidationError: With a caller-facing message
    """
    if not isinstance(body, dict):
        raise SubmissionValidationError("Request body must be a JSON object")

    part = body.get("part")
    data = body.get("data")
    if not data or not part:
        raise SubmissionValidationError("Missing data or part in request body")

    if not isinstance(part, str | int) or isinstance(part, bool) or str(part) not in VALID_PARTS:
        raise SubmissionValidationError("Invalid form part")

    if not isinstance(data, dict):
        raise SubmissionValidationError("Form data must be a JSON object")

    try:
        return _submission_adapter.validate_python({"part": str(part), "data": data})
    except ValidationError as e:
        raise SubmissionValidationError(_first_error_message(e)) from e
