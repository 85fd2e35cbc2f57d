import logging
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker

from planner.core.config import get_settings

logger = logging.getLogger(__name__)


def engine_options(database_url: str) -> dict[str, Any]:
    url = make_url(database_url)
    if url.get_backend_name() == "sqlite":
        # Sessions are used from FastAPI's thread pool
        return {"connect_args": {"check_same_thread": False}}
    return {}


def describe_database(database_url: str) -> str:
    """Backend and database name, without credentials."""
    url = make_url(database_url)
    return f"{url.get_backend_name()} ({url.database or 'in-memory'})"


settings = get_settings()
logger.debug(f"Planner state database: {describe_database(settings.database_url)}")
engine = create_engine(settings.database_url, **engine_options(settings.database_url))

SessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
