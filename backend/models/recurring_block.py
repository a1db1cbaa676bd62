"""Recurring block model definitions."""

from datetime import date
from uuid import uuid4

from sqlalchemy import JSON, Boolean, Column, DateTime, String, Time, func
from backend.database import Base


class RecurringBlock(Base):
    """Represents a weekly repeating blocked period, such as a lunch break."""
    __tablename__ = "recurring_blocks"

    id = Column(String, primary_key=True, default=lambda: str(uuid4()))
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())
    user_id = Column(String, index=True, nullable=False)
    title = Column(String, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    days_of_week = Column(JSON, nullable=False, default=list)  # 0=Sunday ... 6=Saturday
    active = Column(Boolean, default=True)
    notes = Column(String)
    professional = Column(String)

    def applies_to(self, day: date) -> bool:
        # date.weekday() is 0=Monday; shift so that Sunday is 0.
        return (day.weekday() + 1) % 7 in (self.days_of_week or [])
