"""Appointment model definitions."""

from uuid import uuid4

from sqlalchemy import Boolean, Column, DateTime, String, func
from backend.database import Base

APPOINTMENT_STATUSES = ('scheduled', 'confirmed', 'completed', 'cancelled', 'done')
DEFAULT_APPOINTMENT_STATUS = 'scheduled'


def normalize_status(value: str | None) -> str:
    normalized = (value or '').strip().lower()
    if normalized in APPOINTMENT_STATUSES:
        return normalized
    return DEFAULT_APPOINTMENT_STATUS


def display_title_for(appointment) -> str:
    if appointment.is_personal:
        return appointment.title or 'Compromisso Pessoal'
    return appointment.patient_name or 'Sem paciente'


def duration_minutes_for(appointment) -> int:
    duration = appointment.end_time - appointment.start_time
    return max(int(duration.total_seconds() // 60), 0)


class Appointment(Base):
    """Represents a scheduled appointment or a personal commitment."""
    __tablename__ = "appointments"

    id = Column(String, primary_key=True, default=lambda: str(uuid4()))
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
    user_id = Column(String, index=True, nullable=False)
    patient_id = Column(String)
    patient_name = Column(String)
    procedure = Column(String)
    procedure_id = Column(String)
    professional = Column(String)
    room = Column(String)
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)
    notes = Column(String)
    status = Column(String, default=DEFAULT_APPOINTMENT_STATUS)
    is_personal = Column(Boolean)
    title = Column(String)
