import asyncio
import re

import pytest

from app.repositories.quote_repository import QuoteRowRepository
from app.services.quote import row_codec
from app.services.quote.errors import NotificationFailure
from app.services.quote.notifications import QuoteNotifier
from app.services.quote.submission_service import QuoteSubmissionService

RANGE_PATTERN = re.compile(r"^A(\d+):([A-Z]+)(\d*)$")


class FakeRowStore:
    """In-memory sheet. rows[0] is the header; row N of the sheet is rows[N - 1]."""

    def __init__(self, rows: list[list[str]] | None = None, yield_after_read: bool = False):
        self.rows: list[list[str]] = [list(row_codec.SHEET_COLUMNS)] + [list(r) for r in rows or []]
        self.yield_after_read = yield_after_read
        # "get_rows" fails every read, "get_row" only single-row reads
        self.fail_on: set[str] = set()
        self.calls: list[tuple] = []

    def _check(self, operation: str) -> None:
        if operation in self.fail_on:
            raise RuntimeError(f"{operation} unavailable")

    async def get_rows(self, range_a1: str) -> list[list[str]]:
        self.calls.append(("get_rows", range_a1))
        self._check("get_rows")

        start, _, end = RANGE_PATTERN.match(range_a1.split("!", 1)[1]).groups()
        start = int(start)
        if end:
            self._check("get_row")
            snapshot = [list(self.rows[start - 1])] if start - 1 < len(self.rows) else []
        else:
            snapshot = [row[:1] for row in self.rows[start - 1 :]]

        if self.yield_after_read:
            # Let another submission run between read and write
            await asyncio.sleep(0)
        return snapshot

    async def insert_row_at_top(self, values: list[str]) -> None:
        self.calls.append(("insert_row_at_top", list(values)))
        self._check("insert_row_at_top")
        self.rows.insert(1, list(values))

    async def update_row(self, position: int, values: list[str]) -> None:
        self.calls.append(("update_row", position, list(values)))
        self._check("update_row")
        self.rows[position - 1] = list(values)

    def data_rows(self) -> list[list[str]]:
        return self.rows[1:]


class FakeMailSender:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent: list[dict] = []

    async def send(self, to: str, subject: str, html_body: str) -> None:
        if self.fail:
            raise NotificationFailure(f"Failed to send email to {to}", recipient=to)
        self.sent.append({"to": to, "subject": subject, "body": html_body})


@pytest.fixture
def fake_store():
    return FakeRowStore()


@pytest.fixture
def fake_mail():
    return FakeMailSender()


@pytest.fixture
def make_service():
    def _make(store: FakeRowStore, mail: FakeMailSender | None = None) -> QuoteSubmissionService:
        repository = QuoteRowRepository(store, "Sheet1")
        notifier = QuoteNotifier(mail, "owner@shiftraa.com", "quotes@shiftraa.com")
        return QuoteSubmissionService(repository, notifier)

    return _make


@pytest.fixture
def service(make_service, fake_store, fake_mail):
    return make_service(fake_store, fake_mail)


@pytest.fixture
def store_factory():
    return FakeRowStore


@pytest.fixture
def mail_factory():
    return FakeMailSender
