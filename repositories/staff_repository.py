"""Repository for staff record database operations."""

import logging
from typing import Any
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.errors import NotFoundError, PersistError
from models.staff_record import StaffRecord as StaffRecordRow
from schemas.staff import StaffRecord

logger = logging.getLogger(__name__)

# Columns a caller may set; id and timestamps belong to the store.
WRITABLE_FIELDS = frozenset(
    {
        "full_name",
        "resumption_date",
        "exit_date",
        "location",
        "designation",
        "hiring_officer",
        "picture_url",
    }
)


def _to_record(row: StaffRecordRow) -> StaffRecord:
    return StaffRecord.model_validate(row)


class StaffRepository:
    """Data access layer for the staff_records table."""

    def __init__(self, db: Session):
        """Initialize repository with database session.

        Args:
            db: SQLAlchemy database session.
        """
        self.db = db

    def _get_row(self, record_id: UUID) -> StaffRecordRow:
        try:
            row = self.db.get(StaffRecordRow, record_id)
        except SQLAlchemyError as e:
            raise PersistError(f"Failed to load staff record {record_id}: {e}") from e
        if row is None:
            raise NotFoundError(f"Staff record {record_id} not found")
        return row

    def _commit(self, action: str) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise PersistError(f"Failed to {action}: {e}") from e

    def _refresh(self, row: StaffRecordRow) -> None:
        try:
            self.db.refresh(row)
        except SQLAlchemyError as e:
            raise PersistError(f"Failed to reload staff record: {e}") from e

    def insert(self, fields: dict[str, Any]) -> StaffRecord:
        """Insert a new staff record.

        Args:
            fields: Column values; unknown keys are rejected.

        Returns:
            The stored record with its server-assigned id and created_at.

        Raises:
            PersistError: If the insert is rejected.
        """
        unknown = set(fields) - WRITABLE_FIELDS
        if unknown:
            raise PersistError(f"Unknown staff record fields: {sorted(unknown)}")

        row = StaffRecordRow(**fields)
        try:
            self.db.add(row)
            self.db.flush()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise PersistError(f"Failed to insert staff record: {e}") from e
        self._commit("insert staff record")
        self._refresh(row)
        logger.info("Created staff record: id=%s", row.id)
        return _to_record(row)

    def update(self, record_id: UUID, fields: dict[str, Any]) -> StaffRecord:
        """Apply a partial update to a staff record.

        Raises:
            NotFoundError: If no record has this id.
            PersistError: If the update is rejected.
        """
        unknown = set(fields) - WRITABLE_FIELDS
        if unknown:
            raise PersistError(f"Unknown staff record fields: {sorted(unknown)}")

        row = self._get_row(record_id)
        for name, value in fields.items():
            setattr(row, name, value)
        self._commit(f"update staff record {record_id}")
        self._refresh(row)
        logger.info(
            "Updated staff record: id=%s fields=%s",
            record_id,
            sorted(fields),
        )
        return _to_record(row)

    def select_all(self) -> list[StaffRecord]:
        """All staff records, newest first."""
        try:
            rows = (
                self.db.query(StaffRecordRow)
                .order_by(StaffRecordRow.created_at.desc())
                .all()
            )
        except SQLAlchemyError as e:
            raise PersistError(f"Failed to fetch staff records: {e}") from e
        return [_to_record(row) for row in rows]

    def select_by_id(self, record_id: UUID) -> StaffRecord:
        """Get a staff record by its ID.

        Raises:
            NotFoundError: If no record has this id.
        """
        return _to_record(self._get_row(record_id))

    def delete(self, record_id: UUID) -> None:
        """Delete a staff record row.

        Raises:
            NotFoundError: If no record has this id.
            PersistError: If the delete is rejected.
        """
        row = self._get_row(record_id)
        try:
            self.db.delete(row)
            self.db.flush()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise PersistError(f"Failed to delete staff record {record_id}: {e}") from e
        self._commit(f"delete staff record {record_id}")
        logger.info("Deleted staff record: id=%s", record_id)
