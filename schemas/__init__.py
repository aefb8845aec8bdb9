"""Schemas package."""

from schemas.staff import (
    STILL_WORKING,
    ErrorResponse,
    ExitRequest,
    PublicConfigResponse,
    StaffRecord,
    StaffStatus,
    derive_status,
    normalize_exit_date,
)

__all__ = [
    "STILL_WORKING",
    "ErrorResponse",
    "ExitRequest",
    "PublicConfigResponse",
    "StaffRecord",
    "StaffStatus",
    "derive_status",
    "normalize_exit_date",
]
