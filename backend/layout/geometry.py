"""Pixel geometry for positioned appointments."""

from dataclasses import dataclass
from typing import Iterable, List

from backend.core import config
from backend.layout.overlap_engine import PositionedAppointment
from backend.layout.time_scale import TimeScale


@dataclass(frozen=True)
class AppointmentGeometry:
    positioned: PositionedAppointment
    x_offset: float
    y_offset: float
    width: float
    height: float

    @property
    def appointment(self):
        return self.positioned.appointment

    @property
    def column(self) -> int:
        return self.positioned.column

    @property
    def total_columns(self) -> int:
        return self.positioned.total_columns


def slot_width(positioned: PositionedAppointment, available_width: float) -> float:
    return available_width / positioned.total_columns


def compute_geometry(
    positioned: PositionedAppointment,
    scale: TimeScale,
    available_width: float,
    padding: float = config.CARD_PADDING,
) -> AppointmentGeometry:
    appointment = positioned.appointment
    column_width = slot_width(positioned, available_width)

    return AppointmentGeometry(
        positioned=positioned,
        x_offset=positioned.column * column_width,
        y_offset=scale.y_position(appointment.start_time),
        width=max(column_width - 2 * padding, 0.0),
        height=scale.clamped_height(appointment.start_time, appointment.end_time),
    )


def layout_geometry(
    positioned_appointments: Iterable[PositionedAppointment],
    scale: TimeScale,
    available_width: float,
    padding: float = config.CARD_PADDING,
) -> List[AppointmentGeometry]:
    return [
        compute_geometry(positioned, scale, available_width, padding)
        for positioned in positioned_appointments
    ]
