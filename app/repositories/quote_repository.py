"""
Repository for quote records stored one per sheet row.

Rows are addressed by their 1-based sheet row number. Row 1 is the header;
new records are inserted at row 2 so the newest request is always on top.
Any failure of the underlying row store surfaces as StoreUnavailable.
"""

from typing import Protocol

from app.infrastructure.observability.logging import get_logger
from app.models.domain.quote_domain import QuoteRecord
from app.services.quote import row_codec
from app.services.quote.errors import StoreUnavailable

logger = get_logger(__name__)


class RowStore(Protocol):
    """Tabular store addressed by A1 ranges (Google Sheets in production)."""

    async def get_rows(self, range_a1: str) -> list[list[str]]: ...

    async def insert_row_at_top(self, values: list[str]) -> None: ...

    async def update_row(self, position: int, values: list[str]) -> None: ...


class QuoteRowRepository:
    """Locate, read and write quote records through the row codec."""

    def __init__(self, store: RowStore, sheet_name: str = "Sheet1"):
        self._store = store
        self._sheet_name = sheet_name

    async def locate(self, session_id: str) -> int | None:
        """
        Find the sheet row holding a session id.

        Linear scan of the session id column; the first exact match wins.

        Returns:
            int | None: 1-based row number, or None when the session is unknown

        Raises:
            StoreUnavailable: If the session column cannot be read
        """
        range_a1 = row_codec.session_column_range(self._sheet_name)
        try:
            rows = await self._store.get_rows(range_a1)
        except Exception as e:
            logger.error("Failed to read session column", session_id=session_id, error=str(e))
            raise StoreUnavailable(f"Failed to find row by UUID: {e}", operation="locate") from e

        for index, row in enumerate(rows):
            if row and row[0] == session_id:
                position = index + row_codec.FIRST_DATA_ROW
                logger.info("Quote row located", session_id=session_id, position=position)
                return position

        logger.info("No quote row for session", session_id=session_id, rows_scanned=len(rows))
        return None

    async def fetch(self, position: int) -> QuoteRecord:
        """Read and decode the record at a row position."""
        range_a1 = row_codec.row_range(self._sheet_name, position)
        try:
            rows = await self._store.get_rows(range_a1)
        except Exception as e:
            logger.error("Failed to read quote row", position=position, error=str(e))
            raise StoreUnavailable(f"Failed to read row {position}: {e}", operation="fetch") from e

        return row_codec.decode(rows[0] if rows else [])

    async def insert_top(self, record: QuoteRecord) -> None:
        """Insert a record as the first row below the header."""
        values = row_codec.encode(record)
        try:
            await self._store.insert_row_at_top(values)
        except Exception as e:
            logger.error("Failed to insert quote row", session_id=record.session_id, error=str(e))
            raise StoreUnavailable(f"Failed to prepend to sheet: {e}", operation="insert") from e

        logger.info("Quote row inserted", session_id=record.session_id, position=row_codec.FIRST_DATA_ROW)

    async def update(self, position: int, record: QuoteRecord) -> None:
        """Overwrite the row at a position with a record."""
        values = row_codec.encode(record)
        try:
            await self._store.update_row(position, values)
        except Exception as e:
            logger.error(
                "Failed to update quote row",
                session_id=record.session_id,
                position=position,
                error=str(e),
            )
            raise StoreUnavailable(f"Failed to update row: {e}", operation="update") from e

        logger.info("Quote row updated", session_id=record.session_id, position=position)
