from sqlalchemy import create_engine, event
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import QueuePool
from devgad.core.config import settings
import logging

logger = logging.getLogger("database")

def _engine_options(url: str) -> dict:
    if url.startswith("sqlite"):
        # Local development and tests
        return {"connect_args": {"check_same_thread": False}}
    return {
        "poolclass": QueuePool,
        "pool_size": 10,
        "max_overflow": 20,
        "pool_pre_ping": True,
        "pool_recycle": 3600,
        "connect_args": {
            "options": "-c timezone=utc",
            "application_name": "devgad_storefront",
        },
    }

engine = create_engine(settings.DATABASE_URL, echo=False, **_engine_options(settings.DATABASE_URL))

@event.listens_for(engine, "connect")
def receive_connect(dbapi_connection, connection_record):
    logger.info("DB connection established")

# Create session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base class for all models
Base = declarative_base()
