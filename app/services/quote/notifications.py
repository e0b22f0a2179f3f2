"""
Email notifications for quote submissions.

The business owner is notified of every part; the customer receives a
confirmation once part 2 is stored and an email address is on file.
Delivery is best-effort: failures are logged and never reach the caller.
"""

from html import escape
from typing import TYPE_CHECKING, Protocol

from app.infrastructure.observability.logging import get_logger
from app.models.domain.quote_domain import MoveScope, QuoteRecord, SubmissionPhase

if TYPE_CHECKING:
    from app.services.quote.submission_service import SubmissionResult

logger = get_logger(__name__)

NOT_PROVIDED = "Not Provided"
CUSTOMER_SUBJECT = "Thank You for Your Shiftraa Moving Quote Request"

SCOPE_LABELS: dict[MoveScope, tuple[tuple[str, str], ...]] = {
    MoveScope.LOCAL: (
        ("Current Address", "current_address"),
        ("New Address", "new_address"),
    ),
    MoveScope.DOMESTIC: (
        ("Current City", "current_city"),
        ("New City", "new_city"),
    ),
    MoveScope.INTERNATIONAL: (
        ("Current Country", "current_country"),
        ("From City", "from_city_international"),
        ("New Country", "new_country"),
        ("To City", "to_city_international"),
    ),
}


class MailSender(Protocol):
    async def send(self, to: str, subject: str, html_body: str) -> None: ...


def _line(label: str, value: str) -> str:
    return f"<p><strong>{label}:</strong> {escape(value)}</p>"


def owner_subject(phase: SubmissionPhase) -> str:
    return f"New Quote Submission - Part {phase.value}"


def owner_body(record: QuoteRecord, phase: SubmissionPhase) -> str:
    """HTML summary of a submission for the business owner."""
    lines = [
        f"<h2>Shiftraa Moving - New Quote Submission (Part {phase.value})</h2>",
        _line("UUID", record.session_id),
        _line("Name", record.name),
        _line("Phone", record.phone),
        _line("Email", record.email or NOT_PROVIDED),
        _line("Move Scope", record.move_scope),
        _line("Home Type", record.home_type_details),
        _line("Vehicle", record.vehicle_selection),
        _line("Moving Date", record.moving_date),
        _line("Requirements", record.requirements),
    ]

    scope = record.scope()
    if phase is SubmissionPhase.PART_2 and scope is not None:
        lines.extend(_line(label, getattr(record, field)) for label, field in SCOPE_LABELS[scope])
        if record.estimated_cost:
            lines.append(_line("Estimated Cost", record.estimated_cost))
        if record.distance:
            lines.append(_line("Distance", record.distance))

    return "\n".join(lines)


def customer_body(record: QuoteRecord, sender_email: str | None) -> str:
    """HTML confirmation sent to the customer after part 2."""
    return "\n".join(
        [
            "<h2>Thank You for Choosing Shiftraa Moving!</h2>",
            f"<p>Dear {escape(record.name or 'Customer')},</p>",
            "<p>We have received your detailed quote request. "
            "Our team will reach out to you shortly to discuss your move.</p>",
            "<p><strong>Summary:</strong></p>",
            f"<p>Move Type: {escape(record.move_scope)}</p>",
            f"<p>Moving Date: {escape(record.moving_date)}</p>",
            f"<p>Contact: {escape(record.phone)}</p>",
            f"<p>Best regards,<br>Shiftraa Moving Team<br>{escape(sender_email or '')}</p>",
        ]
    )


class QuoteNotifier:
    """Sends owner and customer emails for a stored submission."""

    def __init__(
        self,
        sender: MailSender | None,
        owner_email: str | None,
        sender_email: str | None = None,
    ):
        self._sender = sender
        self._owner_email = owner_email
        self._sender_email = sender_email

    async def _deliver(self, kind: str, to: str, subject: str, body: str, session_id: str) -> bool:
        try:
            await self._sender.send(to, subject, body)
        except Exception as e:
            logger.error(
                "Failed to send email, continuing with response",
                kind=kind,
                session_id=session_id,
                error=str(e),
            )
            return False

        logger.info("Email sent", kind=kind, session_id=session_id)
        return True

    async def notify(self, result: "SubmissionResult") -> list[str]:
        """
        Send the emails for a submission.

        Returns:
            list[str]: Kinds of email delivered ("owner", "customer")
        """
        if self._sender is None:
            logger.warning("Mail sender not configured, skipping notifications", session_id=result.session_id)
            return []

        record = result.record
        delivered = []

        if self._owner_email:
            if await self._deliver(
                "owner",
                self._owner_email,
                owner_subject(result.phase),
                owner_body(record, result.phase),
                result.session_id,
            ):
                delivered.append("owner")
        else:
            logger.warning("OWNER_EMAIL not set, skipping owner notification", session_id=result.session_id)

        if result.phase is SubmissionPhase.PART_2 and record.has_email():
            if await self._deliver(
                "customer",
                record.email,
                CUSTOMER_SUBJECT,
                customer_body(record, self._sender_email),
                result.session_id,
            ):
                delivered.append("customer")

        return delivered
