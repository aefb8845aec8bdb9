"""Pydantic schemas for staff records and the staff API."""

from datetime import date, datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

# Marker some clients send instead of an empty exit date
STILL_WORKING = "Still Working"


class StaffStatus(str, Enum):
    """Derived employment status."""

    ACTIVE = "Active"
    EXITED = "Exited"


def normalize_exit_date(exit_date: str | None) -> str:
    """Collapse every "still working" spelling to the empty string."""
    value = (exit_date or "").strip()
    if value.lower() == STILL_WORKING.lower():
        return ""
    return value


def derive_status(exit_date: str | None) -> StaffStatus:
    """Active iff there is no exit date."""
    if normalize_exit_date(exit_date):
        return StaffStatus.EXITED
    return StaffStatus.ACTIVE


class StaffRecord(BaseModel):
    """A staff record as returned by the record store."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID = Field(description="Record ID assigned by the database")
    full_name: str
    resumption_date: date = Field(description="Hire/start date")
    exit_date: str = Field(
        default="",
        description="Exit date, empty while the person is still working",
    )
    location: str
    designation: str
    hiring_officer: str | None = None
    picture_url: str = Field(description="Public URL of the staff photo")
    created_at: datetime
    updated_at: datetime | None = None

    @field_validator("exit_date", mode="before")
    @classmethod
    def empty_exit_date(cls, v: str | None) -> str:
        """Store-side NULL and the sentinel both mean still working."""
        return normalize_exit_date(v)

    @computed_field
    @property
    def status(self) -> StaffStatus:
        """Active or Exited, derived from ``exit_date``."""
        return derive_status(self.exit_date)


class ExitRequest(BaseModel):
    """Body of the mark-exited endpoint."""

    exit_date: str = Field(description="ISO date the staff member left")


class PublicConfigResponse(BaseModel):
    """Connection parameters for the browser-side Supabase client.

    Only the anon key is ever placed here.
    """

    model_config = ConfigDict(populate_by_name=True)

    supabase_url: str = Field(serialization_alias="supabaseUrl")
    supabase_key: str = Field(serialization_alias="supabaseKey")


class ErrorResponse(BaseModel):
    """Standard error response schema."""

    error: str = Field(description="Error message")
