"""
ZeptoMail transactional email client.
Sends HTML emails through the ZeptoMail REST API.
"""

import httpx

from app.infrastructure.observability.logging import get_logger
from app.services.quote.errors import NotificationFailure

logger = get_logger(__name__)

REQUEST_TIMEOUT = 15  # seconds
TOKEN_PREFIX = "Zoho-enczapikey"


class ZeptoMailService:
    """Mail sender posting to the ZeptoMail send endpoint."""

    def __init__(
        self,
        url: str,
        token: str,
        sender_email: str,
        sender_name: str = "Shiftraa Moving",
        client: httpx.AsyncClient | None = None,
    ):
        self.url = url
        self.sender_email = sender_email
        self.sender_name = sender_name
        self._token = token if token.startswith(TOKEN_PREFIX) else f"{TOKEN_PREFIX} {token}"
        self._client = client or httpx.AsyncClient(timeout=httpx.Timeout(REQUEST_TIMEOUT))

    async def close(self) -> None:
        await self._client.aclose()

    def _payload(self, to: str, subject: str, html_body: str) -> dict:
        return {
            "from": {"address": self.sender_email, "name": self.sender_name},
            "to": [{"email_address": {"address": to, "name": ""}}],
            "subject": subject,
            "htmlbody": html_body,
        }

    async def send(self, to: str, subject: str, html_body: str) -> None:
        """
        Send one HTML email.

        Raises:
            NotificationFailure: If the request fails or ZeptoMail rejects it
        """
        logger.info("Sending email", subject=subject)

        try:
            response = await self._client.post(
                self.url,
                json=self._payload(to, subject, html_body),
                headers={
                    "Authorization": self._token,
                    "Accept": "application/json",
                    "Content-Type": "application/json",
                },
            )
        except httpx.RequestError as e:
            raise NotificationFailure(f"Failed to send email to {to}: {e}", recipient=to) from e

        if not response.is_success:
            logger.error(
                "ZeptoMail rejected email",
                status_code=response.status_code,
                response_text=response.text[:200] if response.text else "",
            )
            raise NotificationFailure(
                f"Failed to send email to {to}: HTTP {response.status_code}",
                recipient=to,
                status_code=response.status_code,
            )

        logger.info("Email accepted by ZeptoMail", status_code=response.status_code)
