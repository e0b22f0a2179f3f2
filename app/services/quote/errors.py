"""
Error taxonomy for quote submissions.

SubmissionValidationError -> HTTP 400, nothing written.
StoreUnavailable          -> HTTP 500, request aborted.
NotificationFailure       -> logged only, request still succeeds.
"""


class QuoteSubmissionError(Exception):
    """Base class for quote submission errors."""


class SubmissionValidationError(QuoteSubmissionError):
    """Submission body is missing fields or has an invalid shape."""


class StoreUnavailable(QuoteSubmissionError):
    """The row store could not be read or written."""

    def __init__(self, message: str, operation: str | None = None):
        super().__init__(message)
        self.operation = operation


class NotificationFailure(QuoteSubmissionError):
    """An email could not be delivered."""

    def __init__(self, message: str, recipient: str | None = None, status_code: int | None = None):
        super().__init__(message)
        self.recipient = recipient
        self.status_code = status_code
