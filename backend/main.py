import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from backend.core import config
from backend.database import engine, ensure_appointment_schema, ensure_recurring_block_schema
from backend.models import appointment, recurring_block
from backend.routes import calendar_routes

config.validate_runtime_config()

app = FastAPI()

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)

logger = logging.getLogger(__name__)


@app.on_event('startup')
def initialize_database() -> None:
    try:
        appointment.Base.metadata.create_all(bind=engine)
        recurring_block.Base.metadata.create_all(bind=engine)
        ensure_appointment_schema()
        ensure_recurring_block_schema()
    except SQLAlchemyError:
        logger.exception('Database initialization failed. Check DATABASE_URL and database credentials.')


@app.get('/')
def root():
    return {'status': 'Agenda Calendar API Running'}


app.include_router(calendar_routes.router, prefix='/calendar')
