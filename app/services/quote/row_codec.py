"""
Row codec for the quote sheet.

Converts between QuoteRecord and the flat list of cell values written to
the sheet. Every call site shares SHEET_COLUMNS, so reads and writes stay
aligned with the header row.
"""

from app.models.domain.quote_domain import QuoteRecord

# Version 1 was A..S without `distance`. v1 rows still decode because
# missing trailing cells read as empty strings.
SCHEMA_VERSION = 2

SHEET_COLUMNS: tuple[str, ...] = (
    "session_id",
    "created_at",
    "name",
    "phone",
    "email",
    "move_scope",
    "home_type_details",
    "vehicle_selection",
    "moving_date",
    "requirements",
    "current_address",
    "new_address",
    "current_city",
    "new_city",
    "current_country",
    "from_city_international",
    "new_country",
    "to_city_international",
    "estimated_cost",
    "distance",
)

HEADER_ROW = 1
FIRST_DATA_ROW = HEADER_ROW + 1


def column_letter(index: int) -> str:
    """0-based column index to A1 letters (0 -> A, 26 -> AA)."""
    letters = ""
    index += 1
    while index > 0:
        index, remainder = divmod(index - 1, 26)
        letters = chr(ord("A") + remainder) + letters
    return letters


LAST_COLUMN = column_letter(len(SHEET_COLUMNS) - 1)


def sheet_ref(sheet_name: str) -> str:
    """Sheet name as used in A1 notation, quoted when it is not a bare word."""
    if sheet_name.isalnum():
        return sheet_name
    escaped = sheet_name.replace("'", "''")
    return f"'{escaped}'"


def row_range(sheet_name: str, position: int, last_column: str = LAST_COLUMN) -> str:
    """A1 range covering one full record row."""
    return f"{sheet_ref(sheet_name)}!A{position}:{last_column}{position}"


def header_range(sheet_name: str) -> str:
    return row_range(sheet_name, HEADER_ROW)


def session_column_range(sheet_name: str) -> str:
    """Session id column below the header."""
    return f"{sheet_ref(sheet_name)}!A{FIRST_DATA_ROW}:A"


def combined_phone(record: QuoteRecord) -> str:
    if record.phone:
        return record.phone
    if record.phone_number:
        return f"{record.phone_country_code}{record.phone_number}"
    return ""


def encode(record: QuoteRecord) -> list[str]:
    """Record -> exactly len(SHEET_COLUMNS) cell values."""
    values = []
    for column in SHEET_COLUMNS:
        if column == "phone":
            values.append(combined_phone(record))
        else:
            values.append(getattr(record, column) or "")
    return values


def decode(values: list) -> QuoteRecord:
    """Cell values -> record. Short rows are padded with empty strings."""
    cells = {}
    for index, column in enumerate(SHEET_COLUMNS):
        cell = values[index] if index < len(values) else ""
        cells[column] = "" if cell is None else str(cell)
    return QuoteRecord(**cells)
