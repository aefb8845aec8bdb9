"""Staff record API endpoints."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, Response, UploadFile, status

from app.auth.auth import admin_required, token_required
from app.dependencies import get_staff_service
from config.settings import settings
from schemas.staff import ErrorResponse, ExitRequest, StaffRecord
from services.images import CapturedFrame, UploadableImage, check_content_type, stage_upload
from services.staff_service import StaffRecordService

logger = logging.getLogger(__name__)

router = APIRouter()

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid input or photo"},
    404: {"model": ErrorResponse, "description": "Staff record not found"},
    500: {"model": ErrorResponse, "description": "Record store failure"},
    502: {"model": ErrorResponse, "description": "Object storage failure"},
}


@contextmanager
def resolve_image(
    upload: UploadFile | None,
    captured_photo: UploadFile | None,
) -> Iterator[UploadableImage | None]:
    """Turn a multipart file or a webcam frame into an UploadableImage.

    A multipart file is checked for type and size, then staged to a temp
    file that is removed when the block exits.
    """
    if upload is not None and upload.filename:
        check_content_type(upload.content_type)
        with stage_upload(
            upload.file,
            upload.filename,
            upload.content_type or "",
            settings.upload_staging_dir,
            settings.max_upload_bytes,
        ) as staged:
            yield staged
        return

    if captured_photo is not None:
        yield CapturedFrame.from_stream(
            captured_photo.file,
            captured_photo.content_type,
            captured_photo.filename,
            settings.max_upload_bytes,
        )
        return

    yield None


@router.post(
    "",
    response_model=StaffRecord,
    status_code=status.HTTP_201_CREATED,
    summary="Submit Staff Intake",
    description="""
    Submit a new staff record with a photo.

    The photo comes either from the `staffPicture` file field or from a
    webcam frame sent as a `capturedPhoto` file part. JPG and PNG only,
    at most 5MB. The photo is stored first, then the record is saved.
    """,
    responses=ERROR_RESPONSES,
)
async def submit_intake(
    service: Annotated[StaffRecordService, Depends(get_staff_service)],
    full_name: Annotated[str, Form(alias="fullName")] = "",
    resumption_date: Annotated[str, Form(alias="resumptionDate")] = "",
    exit_date: Annotated[str, Form(alias="exitDate")] = "",
    still_working: Annotated[bool, Form(alias="stillWorking")] = False,
    location: Annotated[str, Form()] = "",
    designation: Annotated[str, Form()] = "",
    hiring_officer: Annotated[str, Form(alias="hiringOfficer")] = "",
    staff_picture: Annotated[
        UploadFile | None,
        File(alias="staffPicture", description="Staff photo (JPG or PNG)"),
    ] = None,
    captured_photo: Annotated[
        UploadFile | None,
        File(alias="capturedPhoto", description="Webcam frame (JPG or PNG)"),
    ] = None,
) -> StaffRecord:
    """Create a staff record from the intake form."""
    logger.info("Processing new staff submission")

    with resolve_image(staff_picture, captured_photo) as image:
        record = await service.create_staff_record(
            full_name=full_name,
            resumption_date=resumption_date,
            location=location,
            designation=designation,
            hiring_officer=hiring_officer,
            exit_date="" if still_working else exit_date,
            image=image,
        )

    logger.info("Staff intake complete: id=%s", record.id)
    return record


@router.get(
    "",
    response_model=list[StaffRecord],
    summary="List Staff Records",
    description="All staff records, newest first.",
    responses=ERROR_RESPONSES,
)
async def list_staff(
    auth_payload: Annotated[dict, Depends(token_required)],
    service: Annotated[StaffRecordService, Depends(get_staff_service)],
) -> list[StaffRecord]:
    return await service.list_staff()


@router.get(
    "/{staff_id}",
    response_model=StaffRecord,
    summary="Get Staff Record",
    responses=ERROR_RESPONSES,
)
async def get_staff(
    staff_id: UUID,
    auth_payload: Annotated[dict, Depends(token_required)],
    service: Annotated[StaffRecordService, Depends(get_staff_service)],
) -> StaffRecord:
    return await service.get_staff_record(staff_id)


@router.patch(
    "/{staff_id}",
    response_model=StaffRecord,
    summary="Edit Staff Record",
    description="""
    Update name, designation, location and/or photo.

    Only the fields sent are changed. A new photo is stored under a fresh
    key; the previous photo is kept in storage.
    """,
    responses=ERROR_RESPONSES,
)
async def edit_staff(
    staff_id: UUID,
    auth_payload: Annotated[dict, Depends(token_required)],
    service: Annotated[StaffRecordService, Depends(get_staff_service)],
    full_name: Annotated[str | None, Form(alias="fullName")] = None,
    designation: Annotated[str | None, Form()] = None,
    location: Annotated[str | None, Form()] = None,
    edit_photo: Annotated[
        UploadFile | None,
        File(alias="editPhoto", description="Replacement photo (JPG or PNG)"),
    ] = None,
    captured_photo: Annotated[
        UploadFile | None,
        File(alias="capturedPhoto", description="Webcam frame (JPG or PNG)"),
    ] = None,
) -> StaffRecord:
    """Apply a partial edit to a staff record."""
    logger.info("Editing staff record %s by %s", staff_id, auth_payload["email"])

    with resolve_image(edit_photo, captured_photo) as image:
        return await service.update_staff_record(
            staff_id,
            full_name=full_name,
            designation=designation,
            location=location,
            new_image=image,
        )


@router.post(
    "/{staff_id}/exit",
    response_model=StaffRecord,
    summary="Mark Staff as Exited",
    responses=ERROR_RESPONSES,
)
async def mark_exited(
    staff_id: UUID,
    body: ExitRequest,
    auth_payload: Annotated[dict, Depends(token_required)],
    service: Annotated[StaffRecordService, Depends(get_staff_service)],
) -> StaffRecord:
    logger.info("Marking staff record %s as exited by %s", staff_id, auth_payload["email"])
    return await service.mark_exited(staff_id, body.exit_date)


@router.delete(
    "/{staff_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Staff Record",
    description="Admin only. Removes the record and, best effort, its photo.",
    responses=ERROR_RESPONSES,
)
async def delete_staff(
    staff_id: UUID,
    auth_payload: Annotated[dict, Depends(admin_required)],
    service: Annotated[StaffRecordService, Depends(get_staff_service)],
) -> Response:
    logger.info("Deleting staff record %s by %s", staff_id, auth_payload["email"])
    await service.delete_staff_record(staff_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
