"""
Overlap layout for calendar columns.

Appointments that overlap in time are rendered side by side. The layout is
computed in three steps:

1. Sort by start, then by end (shorter first), then by id.
2. Split the sorted list into overlap groups: an appointment joins the
   current group while its start is earlier than the latest end seen in it.
3. Inside each group, give every appointment the lowest column whose last
   occupant has already ended (greedy interval colouring). Every member of
   the group shares the group's column count, so all cards get equal width.

Because the input is visited in start order, the greedy colouring uses the
minimum number of columns for each group.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable, List, Protocol, Sequence

logger = logging.getLogger(__name__)


class TimedAppointment(Protocol):
    id: Any
    start_time: datetime
    end_time: datetime


@dataclass(frozen=True)
class PositionedAppointment:
    appointment: Any
    column: int
    total_columns: int

    @property
    def id(self) -> str:
        return str(self.appointment.id)


def effective_end(appointment: TimedAppointment) -> datetime:
    """End time used for layout; malformed ranges collapse to zero length."""
    if appointment.end_time <= appointment.start_time:
        return appointment.start_time
    return appointment.end_time


def overlaps(a: TimedAppointment, b: TimedAppointment) -> bool:
    return a.start_time < effective_end(b) and effective_end(a) > b.start_time


def sort_appointments(appointments: Iterable[TimedAppointment]) -> List[TimedAppointment]:
    return sorted(
        appointments,
        key=lambda appointment: (appointment.start_time, effective_end(appointment), str(appointment.id)),
    )


def build_overlap_groups(sorted_appointments: Sequence[TimedAppointment]) -> List[List[TimedAppointment]]:
    groups: List[List[TimedAppointment]] = []
    current_group: List[TimedAppointment] = []
    group_end = None

    for appointment in sorted_appointments:
        if group_end is not None and appointment.start_time >= group_end:
            groups.append(current_group)
            current_group = []
            group_end = None

        current_group.append(appointment)
        end = effective_end(appointment)
        group_end = end if group_end is None else max(group_end, end)

    if current_group:
        groups.append(current_group)

    return groups


def assign_columns(group: Sequence[TimedAppointment]) -> List[PositionedAppointment]:
    column_ends: List[datetime] = []
    assignments = []

    for appointment in group:
        assigned_column = None

        for index, column_end in enumerate(column_ends):
            if appointment.start_time >= column_end:
                assigned_column = index
                column_ends[index] = effective_end(appointment)
                break

        if assigned_column is None:
            assigned_column = len(column_ends)
            column_ends.append(effective_end(appointment))

        assignments.append((appointment, assigned_column))

    total_columns = len(column_ends)
    return [
        PositionedAppointment(appointment=appointment, column=column, total_columns=total_columns)
        for appointment, column in assignments
    ]


def calculate_layout(appointments: Iterable[TimedAppointment] | None) -> List[PositionedAppointment]:
    if not appointments:
        return []

    sorted_appointments = sort_appointments(appointments)
    malformed = [a.id for a in sorted_appointments if a.end_time <= a.start_time]
    if malformed:
        logger.warning('Clamping %d appointment(s) with end <= start: %s', len(malformed), malformed)

    positioned: List[PositionedAppointment] = []
    for group in build_overlap_groups(sorted_appointments):
        positioned.extend(assign_columns(group))

    return positioned


def calculate_expanded_layout(appointments: Iterable[TimedAppointment] | None) -> List[PositionedAppointment]:
    """Like :func:`calculate_layout`, but cards without a direct conflict take the full width."""
    basic = calculate_layout(appointments)

    expanded: List[PositionedAppointment] = []
    for positioned in basic:
        has_direct_conflict = any(
            other is not positioned and overlaps(positioned.appointment, other.appointment)
            for other in basic
        )
        if has_direct_conflict:
            expanded.append(positioned)
        else:
            expanded.append(PositionedAppointment(appointment=positioned.appointment, column=0, total_columns=1))

    return expanded
