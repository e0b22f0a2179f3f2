"""
Merge engine for two-part submissions.

Reconciles a previously stored record with a new partial payload. Stored
values are only replaced by non-blank incoming values, and the identity
fields (session_id, created_at) are fixed once the record exists.

A change of move scope does not clear the previous scope's geography
fields; anything reading the sheet must tolerate stale cross-scope values.
"""

from datetime import UTC, datetime

from app.models.domain.quote_domain import QuoteFormData, QuoteRecord, SubmissionPhase

IDENTITY_FIELDS = ("session_id", "created_at")


def utc_timestamp(now: datetime | None = None) -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a Z suffix."""
    moment = (now or datetime.now(UTC)).astimezone(UTC)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _incoming_fields(incoming: QuoteFormData) -> dict[str, str]:
    fields = incoming.supplied()
    # The split phone only counts when the local number is present
    country_code = fields.pop("phone_country_code", "")
    number = fields.pop("phone_number", "")
    if number:
        fields["phone"] = f"{country_code}{number}"
        fields["phone_country_code"] = country_code
        fields["phone_number"] = number
    for field in IDENTITY_FIELDS:
        fields.pop(field, None)
    return fields


def merge_record(
    existing: QuoteRecord | None,
    incoming: QuoteFormData,
    phase: SubmissionPhase,
    session_id: str,
    now: datetime | None = None,
) -> QuoteRecord:
    """
    Combine an existing record (or nothing) with an incoming partial payload.

    Args:
        existing: Stored record for this session, None on first sight
        incoming: Submitted form fields
        phase: Which part of the form produced the payload (both parts merge the same way)
        session_id: Resolved session id, used only for new records
        now: Creation time override for new records

    Returns:
        QuoteRecord: The reconciled record
    """
    updates = _incoming_fields(incoming)

    if existing is None:
        return QuoteRecord(
            session_id=session_id,
            created_at=utc_timestamp(now),
            **updates,
        )

    return QuoteRecord(
        **{
            **existing.model_dump(),
            "phone_country_code": existing.phone_country_code,
            "phone_number": existing.phone_number,
            **updates,
            "session_id": existing.session_id,
            "created_at": existing.created_at,
        }
    )
