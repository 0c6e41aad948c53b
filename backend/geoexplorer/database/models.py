from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, Float, DateTime, Boolean
from .session import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ScoreRecord(Base):
    """A finished game session submitted to the leaderboard."""
    __tablename__ = "score_records"

    id = Column(Integer, primary_key=True, index=True)
    player_identity = Column(String(100), index=True, nullable=False)

    # Session outcome
    score = Column(Integer, nullable=False)
    rounds = Column(Integer, nullable=False)
    average_distance_km = Column(Float, nullable=False)

    # Mode the session was played in
    mode = Column(String(20), nullable=False)
    time_limit_sec = Column(Integer, nullable=True)
    ranked = Column(Boolean, default=False, nullable=False)

    # Weekly bucketing
    week_id = Column(Integer, index=True, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)
