from datetime import datetime

from sqlalchemy import Column, DateTime, JSON, String, Text

from planner.db.base import Base


class PendingProposal(Base):
    __tablename__ = "pending_proposals"

    # One slot per session: a newer proposal overwrites the row
    session_id = Column(String(128), primary_key=True)
    preview = Column(Text, nullable=False)
    action = Column(JSON, nullable=False)
    confirmation_token = Column(Text, nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
