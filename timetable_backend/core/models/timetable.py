"""Weekly timetable aggregate. One row per class/academic year/semester holding every weekday's periods."""

import uuid
from datetime import datetime

from sqlalchemy import JSON, Column, DateTime, ForeignKey, String, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship

from timetable_backend.db.session import Base


class WeeklyTimetable(Base):
    __tablename__ = "weekly_timetables"
    __table_args__ = (
        UniqueConstraint("class_id", "academic_year", "semester", name="uq_weekly_timetable_class_year_semester"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    class_id = Column(Uuid(as_uuid=True), ForeignKey("classes.id", ondelete="CASCADE"), nullable=False, index=True)
    academic_year = Column(String(20), nullable=False, index=True)
    semester = Column(String(20), nullable=False, default="1")
    # Soft reference to timetable_outlines.id; deleting an outline does not touch timetables
    outline_id = Column(Uuid(as_uuid=True), nullable=True)
    # {"Monday": [{period_number, subject_id, teacher_id, start_time, end_time, room, type}], ...}
    weekly_timetable = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    school_class = relationship("SchoolClass", foreign_keys=[class_id])
