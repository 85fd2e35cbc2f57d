from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, JSON, String

from planner.db.base import Base


class AppStateRecord(Base):
    """Single serialized planner state, keyed so the row can be found at startup."""

    __tablename__ = "app_state"

    key = Column(String(128), primary_key=True)
    schema_version = Column(Integer, nullable=False, default=1)
    payload = Column(JSON, nullable=False)
    updated_at = Column(
        DateTime,
        nullable=False,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
    )
