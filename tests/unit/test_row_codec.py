"""
Tests for the quote sheet row codec.
"""

from app.models.domain.quote_domain import QuoteRecord
from app.services.quote import row_codec
from app.services.quote.row_codec import SHEET_COLUMNS, decode, encode


def _full_record() -> QuoteRecord:
    return QuoteRecord(**{column: f"value-{index}" for index, column in enumerate(SHEET_COLUMNS)})


def test_encode_emits_one_value_per_column():
    values = encode(QuoteRecord(session_id="abc", name="Jane"))

    assert len(values) == len(SHEET_COLUMNS)
    assert values[0] == "abc"
    assert values[SHEET_COLUMNS.index("name")] == "Jane"
    assert values[SHEET_COLUMNS.index("requirements")] == ""


def test_encode_follows_column_order():
    assert encode(_full_record()) == [f"value-{index}" for index in range(len(SHEET_COLUMNS))]


def test_encode_synthesizes_phone_from_split_fields():
    record = QuoteRecord(phone_country_code="+1", phone_number="5551234")

    assert encode(record)[SHEET_COLUMNS.index("phone")] == "+15551234"


def test_encode_prefers_combined_phone():
    record = QuoteRecord(phone="+447700900123", phone_country_code="+1", phone_number="5551234")

    assert encode(record)[SHEET_COLUMNS.index("phone")] == "+447700900123"


def test_decode_pads_short_rows():
    record = decode(["abc", "2024-05-01T10:00:00.000Z", "Jane"])

    assert record.session_id == "abc"
    assert record.name == "Jane"
    assert record.phone == ""
    assert record.distance == ""


def test_decode_reads_version_one_rows():
    """19-column rows written before `distance` existed still decode."""
    row = [f"v{index}" for index in range(19)]

    record = decode(row)

    assert record.estimated_cost == "v18"
    assert record.distance == ""


def test_decode_ignores_extra_cells():
    row = [f"v{index}" for index in range(len(SHEET_COLUMNS) + 3)]

    record = decode(row)

    assert record.distance == f"v{len(SHEET_COLUMNS) - 1}"


def test_decode_empty_row():
    assert decode([]) == QuoteRecord()


def test_round_trip():
    record = _full_record()

    assert decode(encode(record)) == record


def test_round_trip_sparse_record():
    record = QuoteRecord(session_id="abc", created_at="2024-05-01T10:00:00.000Z", move_scope="Local")

    assert decode(encode(record)) == record


def test_column_letters():
    assert row_codec.column_letter(0) == "A"
    assert row_codec.column_letter(19) == "T"
    assert row_codec.column_letter(25) == "Z"
    assert row_codec.column_letter(26) == "AA"
    assert row_codec.LAST_COLUMN == "T"


def test_ranges():
    assert row_codec.row_range("Sheet1", 5) == "Sheet1!A5:T5"
    assert row_codec.session_column_range("Sheet1") == "Sheet1!A2:A"
    assert row_codec.header_range("Sheet1") == "Sheet1!A1:T1"


def test_sheet_names_with_spaces_are_quoted():
    assert row_codec.row_range("Quote Requests", 2) == "'Quote Requests'!A2:T2"
    assert row_codec.sheet_ref("Bob's") == "'Bob''s'"
