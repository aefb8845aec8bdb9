"""Services package."""

from services.change_feed import StaffChange, StaffChangeFeed
from services.export_service import ExportService
from services.staff_service import StaffRecordService
from services.storage_service import StorageService

__all__ = [
    "ExportService",
    "StaffChange",
    "StaffChangeFeed",
    "StaffRecordService",
    "StorageService",
]
