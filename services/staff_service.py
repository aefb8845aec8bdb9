"""Staff record lifecycle: intake, edit, exit, list and delete.

Photos go to object storage strictly before the row that references them is
written. The two stores are not transactional: when the insert fails after a
successful upload the photo is left in the bucket and the failure is
reported to the caller.
"""

import logging
import re
import time
from collections.abc import Callable
from datetime import date
from typing import Any
from uuid import UUID

from app.errors import PersistError, ValidationError
from config.settings import settings
from repositories.staff_repository import StaffRepository
from schemas.staff import StaffRecord, normalize_exit_date
from services.change_feed import ChangeType, StaffChange, StaffChangeFeed
from services.images import UploadableImage, validate_image
from services.storage_service import StorageService, parse_public_url

logger = logging.getLogger(__name__)

UPDATED_KEY_PREFIX = "updated_"

_UNSAFE_KEY_CHARS = re.compile(r"[^a-zA-Z0-9]")


def sanitize_name(name: str) -> str:
    """Lowercase alphanumeric token for use in a storage key."""
    return _UNSAFE_KEY_CHARS.sub("", name or "").lower() or "staff"


def build_storage_key(name: str, extension: str, timestamp_ms: int, prefix: str = "") -> str:
    """Storage key ``<prefix><name>_<ms>.<ext>`` for a staff photo."""
    return f"{prefix}{sanitize_name(name)}_{timestamp_ms}.{extension}"


def parse_iso_date(value: str | date | None, label: str) -> date:
    """Parse a ``YYYY-MM-DD`` date or raise ValidationError."""
    if isinstance(value, date):
        return value
    text = (value or "").strip()
    if not text:
        raise ValidationError(f"{label} is required")
    try:
        return date.fromisoformat(text)
    except ValueError as e:
        raise ValidationError(f"{label} must be a date in YYYY-MM-DD format") from e


def _require_text(value: str | None, label: str) -> str:
    text = (value or "").strip()
    if not text:
        raise ValidationError(f"{label} is required")
    return text


def _current_time_ms() -> int:
    return int(time.time() * 1000)


class StaffRecordService:
    """Orchestrates object storage and the record store for staff records."""

    def __init__(
        self,
        repository: StaffRepository,
        storage: StorageService,
        change_feed: StaffChangeFeed | None = None,
        clock: Callable[[], int] | None = None,
        max_upload_bytes: int | None = None,
    ):
        """Initialize the service with its collaborators.

        Args:
            repository: Record store access.
            storage: Object storage client for staff photos.
            change_feed: Optional feed notified after each committed change.
            clock: Millisecond clock used for storage key suffixes.
            max_upload_bytes: Photo size limit, defaults to the settings value.
        """
        self.repository = repository
        self.storage = storage
        self.change_feed = change_feed
        self.clock = clock or _current_time_ms
        self.max_upload_bytes = max_upload_bytes or settings.max_upload_bytes

    async def create_staff_record(
        self,
        *,
        full_name: str,
        resumption_date: str | date,
        location: str,
        designation: str,
        image: UploadableImage | None,
        hiring_officer: str | None = None,
        exit_date: str | None = "",
    ) -> StaffRecord:
        """Upload the photo, then insert the staff record.

        Args:
            full_name: Staff member's name.
            resumption_date: ISO start date.
            location: Work location.
            designation: Job title.
            image: Photo from a file upload or a webcam capture.
            hiring_officer: Optional name of the hiring officer.
            exit_date: Empty (or the "Still Working" marker) for active staff.

        Returns:
            The inserted record, including id and created_at.

        Raises:
            ValidationError: Before any storage call, for bad input.
            UploadError: If object storage rejects the photo.
            PersistError: If the insert fails; the uploaded photo stays.
        """
        full_name = _require_text(full_name, "Full name")
        location = _require_text(location, "Location")
        designation = _require_text(designation, "Designation")
        start = parse_iso_date(resumption_date, "Resumption date")

        exit_value = normalize_exit_date(exit_date)
        if exit_value:
            end = parse_iso_date(exit_value, "Exit date")
            if end < start:
                raise ValidationError("Exit date cannot be before resumption date")
            exit_value = end.isoformat()

        data, content_type = validate_image(image, self.max_upload_bytes)

        logger.info("Processing new staff submission: name=%s", full_name)
        picture_url = await self._store_photo(full_name, image.extension, data, content_type)

        fields: dict[str, Any] = {
            "full_name": full_name,
            "resumption_date": start,
            "exit_date": exit_value,
            "location": location,
            "designation": designation,
            "hiring_officer": (hiring_officer or "").strip() or None,
            "picture_url": picture_url,
        }
        try:
            record = self.repository.insert(fields)
        except PersistError:
            logger.error("Staff record insert failed; uploaded photo left at %s", picture_url)
            raise

        self._publish(ChangeType.INSERT, record.id)
        return record

    async def update_staff_record(
        self,
        record_id: UUID,
        *,
        full_name: str | None = None,
        designation: str | None = None,
        location: str | None = None,
        new_image: UploadableImage | None = None,
    ) -> StaffRecord:
        """Apply a partial edit, uploading a replacement photo if given.

        The previous photo is not removed from storage.

        Raises:
            NotFoundError: If the record does not exist.
            ValidationError: If a provided field is blank or the photo is bad.
            UploadError: If the replacement photo is rejected.
            PersistError: If the update is rejected.
        """
        existing = self.repository.select_by_id(record_id)

        fields: dict[str, Any] = {}
        if full_name is not None:
            fields["full_name"] = _require_text(full_name, "Full name")
        if designation is not None:
            fields["designation"] = _require_text(designation, "Designation")
        if location is not None:
            fields["location"] = _require_text(location, "Location")

        if new_image is not None:
            data, content_type = validate_image(new_image, self.max_upload_bytes)
            fields["picture_url"] = await self._store_photo(
                fields.get("full_name", existing.full_name),
                new_image.extension,
                data,
                content_type,
                prefix=UPDATED_KEY_PREFIX,
            )

        if not fields:
            return existing

        record = self.repository.update(record_id, fields)
        self._publish(ChangeType.UPDATE, record_id)
        return record

    async def mark_exited(self, record_id: UUID, exit_date: str | date | None) -> StaffRecord:
        """Set the exit date of a staff record.

        Raises:
            ValidationError: If the date is missing, malformed or before the
                resumption date.
            NotFoundError: If the record does not exist.
            PersistError: If the update is rejected.
        """
        if not isinstance(exit_date, date) and not normalize_exit_date(exit_date):
            raise ValidationError("Exit date is required")
        end = parse_iso_date(exit_date, "Exit date")

        existing = self.repository.select_by_id(record_id)
        if end < existing.resumption_date:
            raise ValidationError("Exit date cannot be before resumption date")

        record = self.repository.update(record_id, {"exit_date": end.isoformat()})
        logger.info("Marked staff record %s as exited on %s", record_id, end.isoformat())
        self._publish(ChangeType.UPDATE, record_id)
        return record

    async def list_staff(self) -> list[StaffRecord]:
        """All staff records, newest first."""
        return self.repository.select_all()

    async def get_staff_record(self, record_id: UUID) -> StaffRecord:
        """One staff record by id."""
        return self.repository.select_by_id(record_id)

    async def delete_staff_record(self, record_id: UUID) -> None:
        """Delete a record after a best-effort removal of its photo.

        Raises:
            NotFoundError: If the record does not exist.
            PersistError: If the row delete fails.
        """
        existing = self.repository.select_by_id(record_id)
        await self._remove_photo(existing.picture_url)
        self.repository.delete(record_id)
        self._publish(ChangeType.DELETE, record_id)

    async def _store_photo(
        self,
        name: str,
        extension: str,
        data: bytes,
        content_type: str,
        prefix: str = "",
    ) -> str:
        key = build_storage_key(name, extension, self.clock(), prefix=prefix)
        await self.storage.upload(key, data, content_type, overwrite=False)
        return self.storage.get_public_url(key)

    async def _remove_photo(self, picture_url: str) -> None:
        location = parse_public_url(picture_url)
        if location is None:
            logger.warning("Invalid picture URL during cleanup: %s", picture_url)
            return
        bucket, key = location
        try:
            await self.storage.delete(bucket, key)
        except Exception:
            # Record removal must not depend on storage cleanup.
            logger.exception("Storage cleanup failed for %s/%s", bucket, key)

    def _publish(self, event: ChangeType, record_id: UUID) -> None:
        if self.change_feed is not None:
            self.change_feed.publish(StaffChange(event=event, record_id=record_id))
