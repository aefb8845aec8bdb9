"""Export staff records to an Excel workbook."""

import io
import logging
from collections.abc import Sequence
from datetime import datetime

import pytz
import xlsxwriter

from app.errors import ExportError
from config.settings import settings
from schemas.staff import StaffRecord

logger = logging.getLogger(__name__)

SHEET_NAME = "Staff Records"
EXPORT_FILENAME = "Staff_Records.xlsx"
XLSX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

COLUMNS = [
    "Full Name",
    "Designation",
    "Location",
    "Resumption Date",
    "Status",
    "Exit Date",
    "Hiring Officer",
    "Photo URL",
    "Created At",
]

# Pinned document creation time so identical input gives identical bytes.
_DOCUMENT_CREATED = datetime(2000, 1, 1)


class ExportService:
    """Turns a list of staff records into an .xlsx document."""

    def __init__(self, timezone: str | None = None):
        """Initialize the exporter.

        Args:
            timezone: IANA zone for the Created At column; defaults to settings.
        """
        self.timezone = pytz.timezone(timezone or settings.timezone)

    def format_timestamp(self, value: datetime) -> str:
        """Localized ``YYYY-MM-DD HH:MM:SS``; naive values are taken as UTC."""
        if value.tzinfo is None:
            value = pytz.utc.localize(value)
        return value.astimezone(self.timezone).strftime("%Y-%m-%d %H:%M:%S")

    def to_row(self, record: StaffRecord) -> list[str]:
        """Cell values for one record, in column order."""
        return [
            record.full_name,
            record.designation,
            record.location,
            record.resumption_date.isoformat(),
            record.status.value,
            record.exit_date,
            record.hiring_officer or "",
            record.picture_url,
            self.format_timestamp(record.created_at),
        ]

    def export_to_spreadsheet(self, records: Sequence[StaffRecord]) -> bytes:
        """Write the records to a single-sheet workbook.

        Args:
            records: Records in the order they should appear.

        Returns:
            The workbook file content.

        Raises:
            ExportError: If the workbook cannot be written.
        """
        buffer = io.BytesIO()
        try:
            workbook = xlsxwriter.Workbook(
                buffer,
                # Cell text is written verbatim, never as a formula or link.
                {"in_memory": True, "strings_to_formulas": False, "strings_to_urls": False},
            )
            workbook.set_properties({"created": _DOCUMENT_CREATED})
            sheet = workbook.add_worksheet(SHEET_NAME)
            sheet.write_row(row=0, col=0, data=COLUMNS)
            for row_number, record in enumerate(records):
                sheet.write_row(row=row_number + 1, col=0, data=self.to_row(record))
            workbook.close()
        except Exception as e:
            logger.exception("Excel generation error")
            raise ExportError(f"Failed to generate Excel file: {e}") from e

        logger.info("Generated staff export: rows=%d", len(records))
        return buffer.getvalue()
