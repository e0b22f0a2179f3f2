"""
Quote submission orchestrator.

Sequences session resolution, row lookup, merge and the store write for one
submission, then sends notifications. Storage failures abort the request;
notification failures are absorbed by the notifier.

Writes are serialized within the process. Every insert shifts existing rows
down by one, so a row number from locate is only valid until the next write.
"""

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import assert_never

from app.infrastructure.observability.logging import get_logger
from app.models.domain.quote_domain import (
    Phase1Request,
    Phase2Request,
    QuoteRecord,
    SubmissionPhase,
)
from app.repositories.quote_repository import QuoteRowRepository
from app.services.quote.errors import StoreUnavailable
from app.services.quote.merge import merge_record
from app.services.quote.notifications import QuoteNotifier
from app.services.quote.session_resolver import resolve_session_id

logger = get_logger(__name__)


class TokenAction(str, Enum):
    ISSUE = "issue"
    CLEAR = "clear"


@dataclass
class SubmissionResult:
    session_id: str
    phase: SubmissionPhase
    record: QuoteRecord
    created: bool
    position: int | None
    token_action: TokenAction
    notifications: list[str] = field(default_factory=list)

    @property
    def message(self) -> str:
        return f"Part {self.phase.value} submitted successfully"


class QuoteSubmissionService:
    """Two-part submission flow over an injected repository and notifier."""

    def __init__(self, repository: QuoteRowRepository, notifier: QuoteNotifier):
        self._repository = repository
        self._notifier = notifier
        self._write_lock = asyncio.Lock()

    async def _persist(
        self, request: Phase1Request | Phase2Request, session_id: str
    ) -> tuple[QuoteRecord, bool, int | None]:
        async with self._write_lock:
            return await self._locate_and_write(request, session_id)

    async def _locate_and_write(
        self, request: Phase1Request | Phase2Request, session_id: str
    ) -> tuple[QuoteRecord, bool, int | None]:
        position = await self._repository.locate(session_id)
        existing = None
        if position is not None:
            existing = await self._repository.fetch(position)
            if existing.session_id != session_id:
                # Row moved under us (another writer inserted above it)
                logger.error(
                    "Quote row changed between locate and fetch",
                    session_id=session_id,
                    position=position,
                    found_session_id=existing.session_id,
                )
                raise StoreUnavailable(
                    f"Row {position} no longer holds session {session_id}",
                    operation="fetch",
                )

        record = merge_record(existing, request.data, request.phase, session_id)

        if position is None:
            await self._repository.insert_top(record)
            return record, True, None

        await self._repository.update(position, record)
        return record, False, position

    async def submit(
        self, request: Phase1Request | Phase2Request, session_token: str | None
    ) -> SubmissionResult:
        """
        Store one part of a quote request.

        Args:
            request: Validated part 1 or part 2 submission
            session_token: Session id presented by the caller, if any

        Returns:
            SubmissionResult: Stored record and what to do with the session token

        Raises:
            StoreUnavailable: If the sheet cannot be read or written
        """
        session_id = resolve_session_id(session_token)
        logger.info(
            "Processing quote submission",
            session_id=session_id,
            part=request.part,
            token_presented=bool(session_token),
        )

        record, created, position = await self._persist(request, session_id)

        match request:
            case Phase1Request():
                token_action = TokenAction.ISSUE
            case Phase2Request():
                token_action = TokenAction.CLEAR
            case _:
                assert_never(request)

        result = SubmissionResult(
            session_id=session_id,
            phase=request.phase,
            record=record,
            created=created,
            position=position,
            token_action=token_action,
        )

        result.notifications = await self._notifier.notify(result)

        logger.info(
            "Quote submission processed",
            session_id=session_id,
            part=request.part,
            created=created,
            position=position,
            notifications=result.notifications,
        )
        return result
