"""Split recurring blocks around the appointments that cover them."""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Iterable, List

from backend.layout.overlap_engine import TimedAppointment

MINUTES_PER_DAY = 24 * 60


@dataclass(frozen=True)
class BlockSegment:
    id: str
    block_id: str
    start_minutes: int
    end_minutes: int


def time_to_minutes(value: time) -> int:
    return value.hour * 60 + value.minute


def _appointment_minutes(appointment: TimedAppointment) -> tuple[int, int]:
    start_minutes = time_to_minutes(appointment.start_time.time())
    if appointment.end_time.date() > appointment.start_time.date():
        end_minutes = MINUTES_PER_DAY
    else:
        end_minutes = time_to_minutes(appointment.end_time.time())
    return start_minutes, end_minutes


def calculate_block_segments(block, appointments: Iterable[TimedAppointment]) -> List[BlockSegment]:
    block_id = str(block.id)
    block_start = time_to_minutes(block.start_time)
    block_end = time_to_minutes(block.end_time)
    if block_end <= block_start:
        # A block ending at 00:00 runs to the end of the day.
        block_end = MINUTES_PER_DAY

    occupied_ranges = []
    for appointment in appointments:
        start_minutes, end_minutes = _appointment_minutes(appointment)
        if start_minutes < block_end and end_minutes > block_start:
            occupied_ranges.append((start_minutes, end_minutes))

    if not occupied_ranges:
        return [BlockSegment(id=f'{block_id}-full', block_id=block_id, start_minutes=block_start, end_minutes=block_end)]

    segments: List[BlockSegment] = []
    current_start = block_start

    for range_start, range_end in sorted(occupied_ranges):
        segment_end = min(range_start, block_end)
        if segment_end > current_start:
            segments.append(
                BlockSegment(
                    id=f'{block_id}-{current_start}-{segment_end}',
                    block_id=block_id,
                    start_minutes=current_start,
                    end_minutes=segment_end,
                )
            )
        current_start = max(current_start, range_end)

    if current_start < block_end:
        segments.append(
            BlockSegment(
                id=f'{block_id}-{current_start}-{block_end}',
                block_id=block_id,
                start_minutes=current_start,
                end_minutes=block_end,
            )
        )

    return segments


def blocks_for_day(blocks: Iterable, day: date) -> list:
    return [block for block in blocks if block.active and block.applies_to(day)]


def segment_bounds(segment: BlockSegment, day: date) -> tuple[datetime, datetime]:
    midnight = datetime.combine(day, time())
    return (
        midnight + timedelta(minutes=segment.start_minutes),
        midnight + timedelta(minutes=segment.end_minutes),
    )
