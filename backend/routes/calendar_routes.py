import logging
from collections import defaultdict
from datetime import date, datetime, time, timedelta, timezone

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field, field_validator, model_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.core import config
from backend.database import SessionLocal, ensure_appointment_schema, ensure_recurring_block_schema
from backend.layout.block_segments import blocks_for_day, calculate_block_segments, segment_bounds
from backend.layout.geometry import AppointmentGeometry, layout_geometry
from backend.layout.overlap_engine import calculate_expanded_layout, calculate_layout
from backend.layout.time_scale import SCALES, TimeScale
from backend.models.appointment import Appointment, display_title_for, duration_minutes_for, normalize_status
from backend.models.recurring_block import RecurringBlock

router = APIRouter(tags=['calendar'])

logger = logging.getLogger(__name__)

DAYS_PER_WEEK = 7
DEFAULT_VIEW = 'week'
DEFAULT_AVAILABLE_WIDTH = 120.0
DATABASE_UNAVAILABLE_DETAIL = 'Database unavailable. Verify DATABASE_URL and database credentials.'
PERSONAL_APPOINTMENT_COLOR = 'blue'
STATUS_COLORS = {
    'confirmed': 'green',
    'cancelled': 'red',
}
DEFAULT_STATUS_COLOR = 'orange'


class AppointmentPayload(BaseModel):
    id: str
    start_time: datetime
    end_time: datetime
    status: str = 'scheduled'
    patient_id: str | None = None
    patient_name: str | None = None
    procedure: str | None = None
    procedure_id: str | None = None
    professional: str | None = None
    room: str | None = None
    notes: str | None = None
    is_personal: bool | None = None
    title: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_validator('id')
    @classmethod
    def validate_id(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Appointment id is required.')
        return normalized

    @field_validator('start_time', 'end_time')
    @classmethod
    def validate_naive_utc(cls, value: datetime) -> datetime:
        # Stored appointments are naive; aware input is converted to naive UTC.
        if value.tzinfo is not None:
            return value.astimezone(timezone.utc).replace(tzinfo=None)
        return value

    @field_validator('status', mode='before')
    @classmethod
    def validate_status(cls, value: str | None) -> str:
        return normalize_status(value)


class LayoutRequest(BaseModel):
    appointments: list[AppointmentPayload] = Field(default_factory=list)
    available_width: float = Field(gt=0)
    view: str = DEFAULT_VIEW
    expanded: bool = False

    @field_validator('view')
    @classmethod
    def validate_view(cls, value: str) -> str:
        normalized = value.strip().lower()
        if normalized not in SCALES:
            raise ValueError('Invalid calendar view.')
        return normalized

    @model_validator(mode='after')
    def validate_unique_ids(self) -> 'LayoutRequest':
        seen: set[str] = set()
        for appointment in self.appointments:
            if appointment.id in seen:
                raise ValueError(f'Duplicate appointment id: {appointment.id}.')
            seen.add(appointment.id)
        return self


class AppointmentResponse(BaseModel):
    id: str
    start_time: datetime
    end_time: datetime
    status: str
    display_title: str
    duration_minutes: int
    is_personal: bool
    patient_id: str | None = None
    patient_name: str | None = None
    procedure: str | None = None
    procedure_id: str | None = None
    professional: str | None = None
    room: str | None = None


class PositionedAppointmentResponse(BaseModel):
    appointment: AppointmentResponse
    column: int
    total_columns: int
    x_offset: float
    y_offset: float
    width: float
    height: float
    color: str


class BlockSegmentResponse(BaseModel):
    id: str
    block_id: str
    title: str
    start_minutes: int
    end_minutes: int
    y_offset: float
    height: float


class DayLayoutResponse(BaseModel):
    date: date
    grid_height: float
    appointments: list[PositionedAppointmentResponse]
    blocked_segments: list[BlockSegmentResponse]


class WeekLayoutResponse(BaseModel):
    week_start: date
    grid_height: float
    days: list[DayLayoutResponse]


class ScaleResponse(BaseModel):
    view: str
    start_hour: int
    end_hour: int
    minute_height: float
    hour_height: float
    min_height: float
    total_grid_height: float
    card_padding: float


def ensure_database_ready() -> None:
    try:
        ensure_appointment_schema()
        ensure_recurring_block_schema()
    except SQLAlchemyError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=DATABASE_UNAVAILABLE_DETAIL,
        ) from exc


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_scale(view: str) -> TimeScale:
    normalized_view = view.strip().lower()
    if normalized_view not in SCALES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='Invalid calendar view.',
        )
    return SCALES[normalized_view]


def appointment_color(appointment) -> str:
    if appointment.is_personal:
        return PERSONAL_APPOINTMENT_COLOR
    return STATUS_COLORS.get(normalize_status(appointment.status), DEFAULT_STATUS_COLOR)


def to_appointment_response(appointment) -> AppointmentResponse:
    return AppointmentResponse(
        id=str(appointment.id),
        start_time=appointment.start_time,
        end_time=appointment.end_time,
        status=normalize_status(appointment.status),
        display_title=display_title_for(appointment),
        duration_minutes=duration_minutes_for(appointment),
        is_personal=bool(appointment.is_personal),
        patient_id=appointment.patient_id,
        patient_name=appointment.patient_name,
        procedure=appointment.procedure,
        procedure_id=appointment.procedure_id,
        professional=appointment.professional,
        room=appointment.room,
    )


def to_positioned_response(geometry: AppointmentGeometry) -> PositionedAppointmentResponse:
    return PositionedAppointmentResponse(
        appointment=to_appointment_response(geometry.appointment),
        column=geometry.column,
        total_columns=geometry.total_columns,
        x_offset=geometry.x_offset,
        y_offset=geometry.y_offset,
        width=geometry.width,
        height=geometry.height,
        color=appointment_color(geometry.appointment),
    )


def layout_appointments(
    appointments,
    scale: TimeScale,
    available_width: float,
    expanded: bool = False,
) -> list[PositionedAppointmentResponse]:
    positioned = calculate_expanded_layout(appointments) if expanded else calculate_layout(appointments)
    geometries = layout_geometry(positioned, scale, available_width)
    return [to_positioned_response(geometry) for geometry in geometries]


def build_day_layout(
    day: date,
    appointments,
    blocks,
    scale: TimeScale,
    available_width: float,
    expanded: bool = False,
) -> DayLayoutResponse:
    blocked_segments: list[BlockSegmentResponse] = []
    for block in blocks_for_day(blocks, day):
        for segment in calculate_block_segments(block, appointments):
            segment_start, segment_end = segment_bounds(segment, day)
            blocked_segments.append(
                BlockSegmentResponse(
                    id=segment.id,
                    block_id=segment.block_id,
                    title=block.title,
                    start_minutes=segment.start_minutes,
                    end_minutes=segment.end_minutes,
                    y_offset=scale.y_position(segment_start),
                    height=scale.height(segment_start, segment_end),
                )
            )

    return DayLayoutResponse(
        date=day,
        grid_height=scale.total_grid_height,
        appointments=layout_appointments(appointments, scale, available_width, expanded),
        blocked_segments=blocked_segments,
    )


def query_appointments(db: Session, user_id: str, range_start: datetime, range_end: datetime) -> list[Appointment]:
    return db.query(Appointment).filter(
        Appointment.user_id == user_id,
        Appointment.start_time >= range_start,
        Appointment.start_time < range_end,
    ).order_by(Appointment.start_time.asc()).all()


def query_active_blocks(db: Session, user_id: str) -> list[RecurringBlock]:
    return db.query(RecurringBlock).filter(
        RecurringBlock.user_id == user_id,
        RecurringBlock.active.is_(True),
    ).all()


def _normalize_user_id(user_id: str) -> str:
    normalized = user_id.strip()
    if not normalized:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='User id is required.',
        )
    return normalized


@router.post('/layout', response_model=list[PositionedAppointmentResponse])
def create_layout(data: LayoutRequest):
    logger.debug('Laying out %d appointment(s) for the %s view', len(data.appointments), data.view)
    return layout_appointments(data.appointments, SCALES[data.view], data.available_width, data.expanded)


@router.get('/scale', response_model=ScaleResponse)
def get_scale_settings(view: str = Query(default=DEFAULT_VIEW)):
    scale = get_scale(view)
    return ScaleResponse(
        view=view.strip().lower(),
        start_hour=scale.start_hour,
        end_hour=scale.end_hour,
        minute_height=scale.minute_height,
        hour_height=scale.hour_height,
        min_height=scale.min_height,
        total_grid_height=scale.total_grid_height,
        card_padding=config.CARD_PADDING,
    )


@router.get('/day', response_model=DayLayoutResponse)
def get_day_layout(
    user_id: str = Query(...),
    day: date = Query(...),
    available_width: float = Query(default=DEFAULT_AVAILABLE_WIDTH, gt=0),
    view: str = Query(default='day'),
    expanded: bool = Query(default=False),
    db: Session = Depends(get_db),
):
    normalized_user_id = _normalize_user_id(user_id)
    scale = get_scale(view)

    ensure_database_ready()

    try:
        day_start = datetime.combine(day, time())
        appointments = query_appointments(db, normalized_user_id, day_start, day_start + timedelta(days=1))
        blocks = query_active_blocks(db, normalized_user_id)
    except SQLAlchemyError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=DATABASE_UNAVAILABLE_DETAIL,
        ) from exc

    logger.debug('Loaded %d appointment(s) for %s on %s', len(appointments), normalized_user_id, day)
    return build_day_layout(day, appointments, blocks, scale, available_width, expanded)


@router.get('/week', response_model=WeekLayoutResponse)
def get_week_layout(
    user_id: str = Query(...),
    week_start: date = Query(...),
    day_width: float = Query(default=DEFAULT_AVAILABLE_WIDTH, gt=0),
    expanded: bool = Query(default=False),
    db: Session = Depends(get_db),
):
    normalized_user_id = _normalize_user_id(user_id)
    scale = SCALES['week']

    ensure_database_ready()

    try:
        range_start = datetime.combine(week_start, time())
        range_end = range_start + timedelta(days=DAYS_PER_WEEK)
        appointments = query_appointments(db, normalized_user_id, range_start, range_end)
        blocks = query_active_blocks(db, normalized_user_id)
    except SQLAlchemyError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=DATABASE_UNAVAILABLE_DETAIL,
        ) from exc

    appointments_by_day = defaultdict(list)
    for appointment in appointments:
        appointments_by_day[appointment.start_time.date()].append(appointment)

    days = []
    for offset in range(DAYS_PER_WEEK):
        current_day = week_start + timedelta(days=offset)
        days.append(
            build_day_layout(
                current_day,
                appointments_by_day[current_day],
                blocks,
                scale,
                day_width,
                expanded,
            )
        )

    return WeekLayoutResponse(week_start=week_start, grid_height=scale.total_grid_height, days=days)
