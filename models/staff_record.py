"""Staff record model in the public schema."""

import uuid

from sqlalchemy import Column, Date, Text, Uuid

from models.base import Base, TimestampModel


class StaffRecord(TimestampModel, Base):
    """One staff member captured through the intake form.

    ``exit_date`` is free text: an empty string means the person is still
    working. Status is never stored.
    """

    __tablename__ = "staff_records"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    full_name = Column(Text, nullable=False)
    resumption_date = Column(Date, nullable=False)
    exit_date = Column(Text, nullable=True, default="")
    location = Column(Text, nullable=False)
    designation = Column(Text, nullable=False)
    hiring_officer = Column(Text, nullable=True)
    picture_url = Column(Text, nullable=False)
