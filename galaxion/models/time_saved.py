# galaxion/models/time_saved.py
from sqlalchemy import (
    Column,
    Integer,
    Float,
    Date,
    DateTime,
    ForeignKey,
    String,
)
from galaxion.models.user import Base
from galaxion.utils.db import utcnow


class TimeSaved(Base):
    __tablename__ = "time_saved"
    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False)
    minutes_per_day = Column(Float, nullable=False, default=0.0)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow)


class TimeSavedHistory(Base):
    __tablename__ = "time_saved_history"
    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    date = Column(DateTime, default=utcnow, index=True)
    minutes_saved = Column(Float, nullable=False, default=0.0)


class TimeSavedGoal(Base):
    __tablename__ = "time_saved_goals"
    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    target_minutes_monthly = Column(Integer, nullable=False)
    target_date = Column(Date, nullable=False)
    status = Column(String, nullable=False, default="active")
    created_at = Column(DateTime, default=utcnow)
