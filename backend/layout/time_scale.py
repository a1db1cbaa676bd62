"""Time-to-pixel conversion for the calendar grids."""

from dataclasses import dataclass
from datetime import datetime

from backend.core import config


@dataclass(frozen=True)
class TimeScale:
    """Vertical scale of a calendar grid anchored at ``start_hour``."""

    minute_height: float
    start_hour: int = 7
    end_hour: int = 24
    min_visual_minutes: int = 15

    @property
    def total_minutes(self) -> int:
        return (self.end_hour - self.start_hour) * 60

    @property
    def hour_height(self) -> float:
        return self.minute_height * 60

    @property
    def total_grid_height(self) -> float:
        return self.total_minutes * self.minute_height

    @property
    def min_height(self) -> float:
        return self.min_visual_minutes * self.minute_height

    def minutes_from_start(self, moment: datetime) -> int:
        # Seconds are ignored, times before the anchor come out negative.
        return (moment.hour - self.start_hour) * 60 + moment.minute

    def y_position(self, moment: datetime) -> float:
        return self.minutes_from_start(moment) * self.minute_height

    def height(self, start: datetime, end: datetime) -> float:
        duration_minutes = (end - start).total_seconds() / 60.0
        return max(duration_minutes, 0.0) * self.minute_height

    def clamped_height(self, start: datetime, end: datetime) -> float:
        return max(self.height(start, end), self.min_height)


DAY_SCALE = TimeScale(
    minute_height=config.DAY_MINUTE_HEIGHT,
    start_hour=config.CALENDAR_START_HOUR,
    end_hour=config.CALENDAR_END_HOUR,
    min_visual_minutes=config.MIN_VISUAL_MINUTES,
)

WEEK_SCALE = TimeScale(
    minute_height=config.WEEK_MINUTE_HEIGHT,
    start_hour=config.CALENDAR_START_HOUR,
    end_hour=config.CALENDAR_END_HOUR,
    min_visual_minutes=config.MIN_VISUAL_MINUTES,
)

SCALES = {
    'day': DAY_SCALE,
    'week': WEEK_SCALE,
}
