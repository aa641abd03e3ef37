"""Reusable bell schedule: ordered periods/breaks from which timetable slots are derived."""

import uuid
from datetime import datetime

from sqlalchemy import JSON, Column, DateTime, String, Text, UniqueConstraint, Uuid

from timetable_backend.db.session import Base


class TimetableOutline(Base):
    __tablename__ = "timetable_outlines"
    __table_args__ = (UniqueConstraint("name", name="uq_timetable_outline_name"),)

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    # [{name, start_time, end_time, type, duration}] in presentation order
    periods = Column(JSON, nullable=False, default=list)
    # {"Saturday": [...periods]} for weekdays that deviate from `periods`
    day_overrides = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
