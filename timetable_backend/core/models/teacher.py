"""Teachers and the subjects they are qualified to teach."""

import uuid
from datetime import datetime

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String, Table, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship

from timetable_backend.db.session import Base

teacher_subjects = Table(
    "teacher_subjects",
    Base.metadata,
    Column("teacher_id", Uuid(as_uuid=True), ForeignKey("teachers.id", ondelete="CASCADE"), primary_key=True),
    Column("subject_id", Uuid(as_uuid=True), ForeignKey("subjects.id", ondelete="CASCADE"), primary_key=True),
)


class Teacher(Base):
    __tablename__ = "teachers"
    __table_args__ = (UniqueConstraint("email", name="uq_teacher_email"),)

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    full_name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    experience_years = Column(Integer, nullable=True)
    # Null means the configured default applies
    max_periods_per_day = Column(Integer, nullable=True)
    # {"Saturday": {"available": false, "max_periods": null}}; weekdays left out are available
    availability = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    subjects = relationship("Subject", secondary=teacher_subjects, lazy="selectin")
