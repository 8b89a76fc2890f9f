"""
WeeklyData model — one row per survey week, items kept as a JSON payload.
"""
from sqlalchemy import Column, Integer, BigInteger, Date, DateTime, JSON, Index
from sqlalchemy.sql import func

from survey_tracker.database import Base


class WeeklyData(Base):
    __tablename__ = 'weekly_data'
    __table_args__ = (
        Index('idx_weekly_data_timestamp', 'timestamp'),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    date = Column(Date, nullable=False, unique=True)
    timestamp = Column(BigInteger, nullable=False)
    data = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
