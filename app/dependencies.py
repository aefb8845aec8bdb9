"""FastAPI dependencies wiring services to their collaborators."""

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from config.database import get_db
from repositories.staff_repository import StaffRepository
from services.change_feed import StaffChangeFeed
from services.export_service import ExportService
from services.staff_service import StaffRecordService
from services.storage_service import StorageService


def get_storage_service() -> StorageService:
    """Object storage client for staff photos."""
    return StorageService.from_settings()


def get_change_feed(request: Request) -> StaffChangeFeed:
    """The application's change feed."""
    return request.app.state.change_feed


def get_staff_service(
    db: Annotated[Session, Depends(get_db)],
    storage: Annotated[StorageService, Depends(get_storage_service)],
    change_feed: Annotated[StaffChangeFeed, Depends(get_change_feed)],
) -> StaffRecordService:
    """Staff record service bound to the request's database session."""
    return StaffRecordService(
        repository=StaffRepository(db),
        storage=storage,
        change_feed=change_feed,
    )


def get_export_service() -> ExportService:
    """Spreadsheet export service."""
    return ExportService()
