"""Models package."""

from models.base import Base, TimestampModel
from models.staff_record import StaffRecord

__all__ = [
    "Base",
    "TimestampModel",
    "StaffRecord",
]
