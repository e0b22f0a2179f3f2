"""
Google Sheets API Service used as the quote row store.
Handles service-account authentication, value reads, row inserts below the
header and in-place row updates.
Low-level Sheets API client
"""

import json
import time
from pathlib import Path
from urllib.parse import quote

import httpx
import jwt

from app.infrastructure.observability.logging import get_logger
from app.services.quote.row_codec import HEADER_ROW, column_letter, row_range

logger = get_logger(__name__)

# Google Sheets API configuration
SHEETS_API_BASE_URL = "https://sheets.googleapis.com/v4/spreadsheets"
SHEETS_SCOPE = "https://www.googleapis.com/auth/spreadsheets"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
JWT_BEARER_GRANT = "urn:ietf:params:oauth:grant-type:jwt-bearer"

REQUEST_TIMEOUT = 30  # seconds
TOKEN_LIFETIME = 3600  # seconds
TOKEN_REFRESH_MARGIN = 60  # refresh this long before expiry


class GoogleSheetsError(Exception):
    """Custom exception for Google Sheets API errors."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_data: dict | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.response_data = response_data or {}


class ServiceAccountCredentials:
    """
    Service-account credentials using the OAuth 2.0 JWT bearer grant.

    Signs an RS256 assertion with the account's private key and exchanges it
    for an access token, cached until shortly before it expires.
    """

    def __init__(
        self,
        client_email: str,
        private_key: str,
        token_uri: str = GOOGLE_TOKEN_URL,
        private_key_id: str | None = None,
        scopes: list[str] | None = None,
    ):
        self.client_email = client_email
        self.private_key = private_key
        self.token_uri = token_uri
        self.private_key_id = private_key_id
        self.scopes = scopes or [SHEETS_SCOPE]

        self._access_token: str | None = None
        self._expires_at: float = 0.0

    @classmethod
    def from_info(cls, info: dict, scopes: list[str] | None = None) -> "ServiceAccountCredentials":
        missing = [key for key in ("client_email", "private_key") if not info.get(key)]
        if missing:
            raise GoogleSheetsError(f"Service account key is missing: {', '.join(missing)}")

        return cls(
            client_email=info["client_email"],
            private_key=info["private_key"],
            token_uri=info.get("token_uri") or GOOGLE_TOKEN_URL,
            private_key_id=info.get("private_key_id"),
            scopes=scopes,
        )

    @classmethod
    def from_file(cls, path: str | Path, scopes: list[str] | None = None) -> "ServiceAccountCredentials":
        try:
            info = json.loads(Path(path).read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise GoogleSheetsError(f"Cannot load service account key from {path}: {e}") from e
        return cls.from_info(info, scopes=scopes)

    def build_assertion(self, now: int | None = None) -> str:
        """Signed JWT asserting this service account."""
        issued_at = int(now if now is not None else time.time())
        payload = {
            "iss": self.client_email,
            "scope": " ".join(self.scopes),
            "aud": self.token_uri,
            "iat": issued_at,
            "exp": issued_at + TOKEN_LIFETIME,
        }
        headers = {"kid": self.private_key_id} if self.private_key_id else None
        return jwt.encode(payload, self.private_key, algorithm="RS256", headers=headers)

    def token_valid(self) -> bool:
        return bool(self._access_token) and time.time() < self._expires_at - TOKEN_REFRESH_MARGIN

    async def get_access_token(self, client: httpx.AsyncClient) -> str:
        """Return a cached access token or fetch a new one."""
        if self.token_valid():
            return self._access_token

        try:
            response = await client.post(
                self.token_uri,
                data={"grant_type": JWT_BEARER_GRANT, "assertion": self.build_assertion()},
            )
        except httpx.RequestError as e:
            logger.error("Service account token request failed", error=str(e))
            raise GoogleSheetsError(f"Token request failed: {e}") from e

        if not response.is_success:
            logger.error(
                "Service account token exchange rejected",
                status_code=response.status_code,
                response_text=response.text[:200] if response.text else "",
            )
            raise GoogleSheetsError(
                f"Token exchange failed (HTTP {response.status_code})",
                status_code=response.status_code,
            )

        data = response.json()
        self._access_token = data["access_token"]
        self._expires_at = time.time() + int(data.get("expires_in", TOKEN_LIFETIME))
        logger.debug("Service account token refreshed", client_email=self.client_email)
        return self._access_token


class GoogleSheetsService:
    """
    Row store backed by one sheet of a Google spreadsheet.

    Rows are written RAW so values are stored exactly as submitted. Requests
    are not retried; a failed write is reported to the caller as-is.
    """

    def __init__(
        self,
        spreadsheet_id: str,
        sheet_name: str,
        credentials: ServiceAccountCredentials,
        client: httpx.AsyncClient | None = None,
    ):
        self.spreadsheet_id = spreadsheet_id
        self.sheet_name = sheet_name
        self._credentials = credentials
        self._client = client or self._create_client()
        self._sheet_id: int | None = None

    def _create_client(self) -> httpx.AsyncClient:
        """Create async HTTP client for Sheets API."""
        timeout = httpx.Timeout(REQUEST_TIMEOUT)
        limits = httpx.Limits(max_keepalive_connections=10, max_connections=20)
        return httpx.AsyncClient(timeout=timeout, limits=limits)

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    def _values_url(self, range_a1: str) -> str:
        return f"{SHEETS_API_BASE_URL}/{self.spreadsheet_id}/values/{quote(range_a1, safe='!:')}"

    async def _request(self, method: str, url: str, operation: str, **kwargs) -> dict:
        token = await self._credentials.get_access_token(self._client)
        headers = {
            "Authorization": f"Bearer {token}",
            "Accept": "application/json",
        }

        try:
            response = await self._client.request(method, url, headers=headers, **kwargs)
        except httpx.RequestError as e:
            logger.error(f"Sheets API {operation} request failed", error=str(e))
            raise GoogleSheetsError(f"Sheets API {operation} failed: {e}") from e

        return self._handle_api_response(response, operation)

    def _handle_api_response(self, response: httpx.Response, operation: str) -> dict:
        """
        Handle and validate Sheets API response.

        Args:
            response: HTTP response from Sheets API
            operation: Operation name for logging

        Returns:
            dict: Parsed response data

        Raises:
            GoogleSheetsError: If response contains errors
        """
        if response.is_success:
            try:
                return response.json() if response.text else {}
            except ValueError as e:
                logger.error(f"Failed to parse Sheets API {operation} response", error=str(e))
                raise GoogleSheetsError(f"Invalid response format: {e}") from e

        try:
            error_data = response.json() if response.text else {}
        except ValueError:
            error_data = {}

        error_info = error_data.get("error", {}) if isinstance(error_data, dict) else {}
        error_message = error_info.get("message") or f"HTTP {response.status_code}"

        logger.error(
            f"Sheets API {operation} failed",
            status_code=response.status_code,
            error_message=error_message,
        )
        raise GoogleSheetsError(
            f"Sheets API {operation} failed: {error_message}",
            status_code=response.status_code,
            response_data=error_data,
        )

    async def get_rows(self, range_a1: str) -> list[list[str]]:
        """Read a range; trailing empty rows and cells are omitted by the API."""
        data = await self._request("GET", self._values_url(range_a1), "get_rows")
        return data.get("values", [])

    async def _get_sheet_id(self) -> int:
        if self._sheet_id is not None:
            return self._sheet_id

        data = await self._request(
            "GET",
            f"{SHEETS_API_BASE_URL}/{self.spreadsheet_id}",
            "get_metadata",
            params={"fields": "sheets(properties(sheetId,title))"},
        )
        sheets = [sheet.get("properties", {}) for sheet in data.get("sheets", [])]
        match = next((props for props in sheets if props.get("title") == self.sheet_name), None)
        if match is None:
            titles = [props.get("title") for props in sheets]
            logger.error("Sheet not found in spreadsheet", sheet_name=self.sheet_name, titles=titles)
            raise GoogleSheetsError(f"Sheet {self.sheet_name!r} not found in spreadsheet")

        self._sheet_id = match.get("sheetId", 0)
        logger.info("Sheet ID retrieved", sheet_id=self._sheet_id, sheet_name=self.sheet_name)
        return self._sheet_id

    async def update_row(self, position: int, values: list[str]) -> None:
        """Overwrite the cells of one row starting at column A."""
        range_a1 = row_range(self.sheet_name, position, column_letter(len(values) - 1))
        await self._request(
            "PUT",
            self._values_url(range_a1),
            "update_row",
            params={"valueInputOption": "RAW"},
            json={"range": range_a1, "majorDimension": "ROWS", "values": [values]},
        )
        logger.debug("Row updated", position=position, columns=len(values))

    async def insert_row_at_top(self, values: list[str]) -> None:
        """Insert a blank row directly under the header, then fill it."""
        sheet_id = await self._get_sheet_id()
        await self._request(
            "POST",
            f"{SHEETS_API_BASE_URL}/{self.spreadsheet_id}:batchUpdate",
            "insert_row",
            json={
                "requests": [
                    {
                        "insertRange": {
                            "range": {
                                "sheetId": sheet_id,
                                "startRowIndex": HEADER_ROW,
                                "endRowIndex": HEADER_ROW + 1,
                                "startColumnIndex": 0,
                                "endColumnIndex": len(values),
                            },
                            "shiftDimension": "ROWS",
                        }
                    }
                ]
            },
        )
        await self.update_row(HEADER_ROW + 1, values)
