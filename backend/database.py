from threading import Lock

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.orm import declarative_base, sessionmaker

from backend.core import config


engine = create_engine(config.DATABASE_URL)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()

_schema_lock = Lock()
_appointment_schema_checked = False
_recurring_block_schema_checked = False


def ensure_appointment_schema() -> None:
    global _appointment_schema_checked

    if _appointment_schema_checked:
        return

    with _schema_lock:
        if _appointment_schema_checked:
            return

        inspector = inspect(engine)

        if 'appointments' not in inspector.get_table_names():
            _appointment_schema_checked = True
            return

        with engine.begin() as connection:
            connection.execute(
                text('CREATE INDEX IF NOT EXISTS idx_appointments_user_start ON appointments(user_id, start_time)')
            )

        _appointment_schema_checked = True


def ensure_recurring_block_schema() -> None:
    global _recurring_block_schema_checked

    if _recurring_block_schema_checked:
        return

    with _schema_lock:
        if _recurring_block_schema_checked:
            return

        inspector = inspect(engine)

        if 'recurring_blocks' not in inspector.get_table_names():
            _recurring_block_schema_checked = True
            return

        with engine.begin() as connection:
            connection.execute(
                text('CREATE INDEX IF NOT EXISTS idx_recurring_blocks_user_active ON recurring_blocks(user_id, active)')
            )

        _recurring_block_schema_checked = True
