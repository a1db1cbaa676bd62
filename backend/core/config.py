import os

from dotenv import load_dotenv

load_dotenv()



def _get_float(value: str | None, default: float) -> float:
    if value is None or not value.strip():
        return default
    return float(value)


def _get_int(value: str | None, default: int) -> int:
    if value is None or not value.strip():
        return default
    return int(value)


def _get_list(value: str | None, default: list[str]) -> list[str]:
    if value is None:
        return default
    return [item.strip() for item in value.split(',') if item.strip()]

APP_ENV = os.getenv("APP_ENV", "development")

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./agenda.db")

CORS_ALLOWED_ORIGINS = _get_list(os.getenv("CORS_ALLOWED_ORIGINS"), ["http://localhost:4200"])

# Visible calendar window. The grid is anchored at CALENDAR_START_HOUR.
CALENDAR_START_HOUR = _get_int(os.getenv("CALENDAR_START_HOUR"), 7)
CALENDAR_END_HOUR = _get_int(os.getenv("CALENDAR_END_HOUR"), 24)

# Pixels per minute: 60px per hour on the day view, 150px per hour on the week view.
DAY_MINUTE_HEIGHT = _get_float(os.getenv("DAY_MINUTE_HEIGHT"), 1.0)
WEEK_MINUTE_HEIGHT = _get_float(os.getenv("WEEK_MINUTE_HEIGHT"), 2.5)

MIN_VISUAL_MINUTES = _get_int(os.getenv("MIN_VISUAL_MINUTES"), 15)
CARD_PADDING = _get_float(os.getenv("CARD_PADDING"), 4.0)

def validate_runtime_config() -> None:
    if not 0 <= CALENDAR_START_HOUR < CALENDAR_END_HOUR <= 24:
        raise RuntimeError("CALENDAR_START_HOUR must be earlier than CALENDAR_END_HOUR.")
    if APP_ENV.lower() == "production" and not os.getenv("DATABASE_URL"):
        raise RuntimeError("DATABASE_URL must be set in production.")
