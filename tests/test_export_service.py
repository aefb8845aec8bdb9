"""Tests for the Excel export."""

import io
import re
import zipfile
from datetime import date, datetime, timezone
from uuid import UUID

import pytest

from schemas.staff import StaffRecord
from services.export_service import COLUMNS, ExportService


def make_record(n: int, exit_date: str = "", hiring_officer: str | None = "R. Smith") -> StaffRecord:
    return StaffRecord(
        id=UUID(int=n),
        full_name=f"Person {n}",
        resumption_date=date(2024, 1, n),
        exit_date=exit_date,
        location="HQ",
        designation="Analyst",
        hiring_officer=hiring_officer,
        picture_url=f"https://example.supabase.co/storage/v1/object/public/staff-photos/p{n}.jpg",
        created_at=datetime(2024, 2, n, 9, 30, tzinfo=timezone.utc),
    )


def sheet_strings(content: bytes) -> list[str]:
    """Shared strings of the workbook, in first-use order."""
    with zipfile.ZipFile(io.BytesIO(content)) as archive:
        xml = archive.read("xl/sharedStrings.xml").decode("utf-8")
    return re.findall(r"<t[^>]*>([^<]*)</t>", xml)


def sheet_row_count(content: bytes) -> int:
    with zipfile.ZipFile(io.BytesIO(content)) as archive:
        xml = archive.read("xl/worksheets/sheet1.xml").decode("utf-8")
    return len(re.findall(r"<row ", xml))


@pytest.fixture
def exporter() -> ExportService:
    return ExportService(timezone="Africa/Lagos")


def test_header_and_rows(exporter):
    content = exporter.export_to_spreadsheet([make_record(2), make_record(1, exit_date="2024-05-01")])

    strings = sheet_strings(content)
    assert strings[: len(COLUMNS)] == COLUMNS
    assert "Person 2" in strings
    assert "Active" in strings
    assert "Exited" in strings
    assert "2024-05-01" in strings
    assert sheet_row_count(content) == 3


def test_status_and_created_at_cells(exporter):
    active = exporter.to_row(make_record(3, hiring_officer=None))
    exited = exporter.to_row(make_record(4, exit_date="2024-06-01"))

    assert active[COLUMNS.index("Status")] == "Active"
    assert active[COLUMNS.index("Exit Date")] == ""
    assert active[COLUMNS.index("Hiring Officer")] == ""
    assert active[COLUMNS.index("Resumption Date")] == "2024-01-03"
    # 09:30 UTC is 10:30 in Lagos
    assert active[COLUMNS.index("Created At")] == "2024-02-03 10:30:00"
    assert exited[COLUMNS.index("Status")] == "Exited"
    assert exited[COLUMNS.index("Exit Date")] == "2024-06-01"


def test_naive_timestamp_treated_as_utc(exporter):
    assert exporter.format_timestamp(datetime(2024, 2, 1, 23, 0)) == "2024-02-02 00:00:00"


def test_export_is_deterministic(exporter):
    records = [make_record(n) for n in range(1, 6)]

    first = exporter.export_to_spreadsheet(records)
    second = exporter.export_to_spreadsheet(records)

    assert first == second


def test_empty_list_gives_headers_only(exporter):
    content = exporter.export_to_spreadsheet([])

    assert sheet_strings(content) == COLUMNS
    assert sheet_row_count(content) == 1


def test_formula_like_text_stays_a_string(exporter):
    record = make_record(1).model_copy(
        update={
            "full_name": "=SUM(A1:A9)",
            "designation": "=1+1",
            "location": "http://example.com/x",
        }
    )

    content = exporter.export_to_spreadsheet([record])

    with zipfile.ZipFile(io.BytesIO(content)) as archive:
        sheet_xml = archive.read("xl/worksheets/sheet1.xml").decode("utf-8")
        names = archive.namelist()
    assert "<f>" not in sheet_xml
    assert not any("_rels/sheet1.xml.rels" in name for name in names)
    strings = sheet_strings(content)
    assert "=SUM(A1:A9)" in strings
    assert "=1+1" in strings
    assert "http://example.com/x" in strings
