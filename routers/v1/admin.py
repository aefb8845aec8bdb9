"""Admin export endpoints."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Response

from app.auth.auth import token_required
from app.dependencies import get_export_service, get_staff_service
from schemas.staff import ErrorResponse
from services.export_service import EXPORT_FILENAME, XLSX_CONTENT_TYPE, ExportService
from services.staff_service import StaffRecordService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "/export-excel",
    summary="Export Staff Records",
    description="Download every staff record as an Excel workbook, newest first.",
    response_class=Response,
    responses={
        200: {
            "content": {XLSX_CONTENT_TYPE: {}},
            "description": "The Staff_Records.xlsx workbook",
        },
        500: {"model": ErrorResponse, "description": "Failed to generate report"},
    },
)
async def export_excel(
    auth_payload: Annotated[dict, Depends(token_required)],
    service: Annotated[StaffRecordService, Depends(get_staff_service)],
    exporter: Annotated[ExportService, Depends(get_export_service)],
) -> Response:
    """Generate the staff spreadsheet."""
    logger.info("Generating Excel report for %s", auth_payload["email"])
    records = await service.list_staff()
    content = exporter.export_to_spreadsheet(records)
    return Response(
        content=content,
        media_type=XLSX_CONTENT_TYPE,
        headers={"Content-Disposition": f"attachment; filename={EXPORT_FILENAME}"},
    )
