"""
Quote submission response models.
"""

from pydantic import BaseModel, Field


class SubmitQuoteResponse(BaseModel):
    """Successful submission of one form part."""

    uuid: str = Field(..., description="Session id correlating part 1 and part 2")
    message: str = Field(..., description="Human-readable outcome")
    success: bool = True


class QuoteErrorResponse(BaseModel):
    """Rejected or failed submission."""

    message: str
    error: str | None = None
