from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from timetable_backend.core.enums import ConflictKind


class ConflictingClass(BaseModel):
    id: UUID
    name: str


class ConflictingPeriod(BaseModel):
    day: str
    period_number: int
    subject_id: UUID
    teacher_id: UUID
    start_time: str
    end_time: str
    room: Optional[str] = None
    type: str = "theory"


class ConflictRecord(BaseModel):
    """Transient double-booking report. Never persisted."""

    type: ConflictKind
    message: str
    conflicting_class: ConflictingClass
    conflicting_period: ConflictingPeriod
    day: Optional[str] = Field(None, description="Day of the candidate assignment, when checking a grid")
    period_number: Optional[int] = Field(None, description="Period of the candidate assignment, when checking a grid")

    @property
    def blocking(self) -> bool:
        return self.type.blocking


class ConflictCheckResponse(BaseModel):
    is_available: bool
    blocking: bool
    conflicts: List[ConflictRecord]
