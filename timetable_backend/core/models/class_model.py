"""School classes (e.g. 10A). Model named SchoolClass to avoid Python 'class' keyword."""
import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, String, UniqueConstraint, Uuid

from timetable_backend.db.session import Base


class SchoolClass(Base):
    """Class master: grade + division. Timetables only need it for existence checks and display names."""

    __tablename__ = "classes"
    __table_args__ = (UniqueConstraint("grade", "division", name="uq_class_grade_division"),)

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    grade = Column(String(20), nullable=False)
    division = Column(String(20), nullable=False)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    @property
    def display_name(self) -> str:
        return f"{self.grade}{self.division}"
