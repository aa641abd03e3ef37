from datetime import datetime
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from timetable_backend.core.enums import PeriodType, Weekday
from timetable_backend.api.v1.conflicts.schemas import ConflictRecord

from .slots import Slot, check_hhmm, clean_room


class PeriodAssignment(BaseModel):
    period_number: int = Field(..., ge=1)
    subject_id: UUID
    teacher_id: UUID
    start_time: str = Field(..., description="24-hour format, e.g. 09:00")
    end_time: str = Field(..., description="24-hour format, e.g. 09:45")
    room: Optional[str] = Field(None, max_length=50)
    type: PeriodType = PeriodType.THEORY

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def parse_time(cls, v: str) -> str:
        return check_hhmm(v)

    @field_validator("room", mode="before")
    @classmethod
    def blank_room_is_none(cls, v: Optional[str]) -> Optional[str]:
        return clean_room(v)

class TimetableSave(BaseModel):
    """Full replacement of a class's week. Days left out are saved empty."""

    academic_year: str = Field(..., min_length=1, max_length=20, description="e.g. 2025")
    semester: str = Field("1", min_length=1, max_length=20)
    weekly_timetable: Dict[Weekday, List[PeriodAssignment]] = Field(default_factory=dict)
    outline_id: Optional[UUID] = Field(None, description="Omit to keep the current outline")
    override_conflicts: bool = False

class PeriodAssign(BaseModel):
    academic_year: str = Field(..., min_length=1, max_length=20)
    semester: str = Field("1", min_length=1, max_length=20)
    day: Weekday
    period_number: int = Field(..., ge=1)
    subject_id: UUID
    teacher_id: UUID
    room: Optional[str] = Field(None, max_length=50)
    type: PeriodType = PeriodType.THEORY
    apply_all_days: bool = False
    override_conflicts: bool = False
    outline_id: Optional[UUID] = None

    @field_validator("room", mode="before")
    @classmethod
    def blank_room_is_none(cls, v: Optional[str]) -> Optional[str]:
        return clean_room(v)

class ClassTimetableResponse(BaseModel):
    class_id: UUID
    class_name: str
    academic_year: str
    semester: str
    outline_id: Optional[UUID] = None
    is_locked: bool = Field(..., description="True once any period is assigned; outline changes need a clear first")
    weekly_timetable: Dict[str, List[PeriodAssignment]]
    slots: List[Slot]
    day_slots: Dict[str, List[Slot]] = Field(default_factory=dict, description="Weekdays whose slots differ from `slots`")
    updated_at: Optional[datetime] = None

class TimetableSaveResponse(BaseModel):
    class_id: UUID
    academic_year: str
    semester: str
    outline_id: Optional[UUID] = None
    total_periods: int
    weekly_timetable: Dict[str, List[PeriodAssignment]]
    warnings: List[ConflictRecord] = Field(default_factory=list)

class PeriodAssignResponse(BaseModel):
    applied: bool
    day: str
    period_number: int
    applied_days: List[str] = Field(default_factory=list)
    weekly_timetable: Dict[str, List[PeriodAssignment]]
    warnings: List[ConflictRecord] = Field(default_factory=list)

class TimetableClearResponse(BaseModel):
    class_id: UUID
    academic_year: str
    deleted: int

class TeacherTimetableEntry(PeriodAssignment):
    class_id: UUID
    class_name: str
    academic_year: str
    semester: str

class TeacherTimetableResponse(BaseModel):
    teacher_id: UUID
    academic_year: Optional[str] = None
    weekly_timetable: Dict[str, List[TeacherTimetableEntry]]

class TeacherPeriodCount(BaseModel):
    teacher_id: UUID
    teacher_name: Optional[str] = None
    periods: int

class TimetableStatsResponse(BaseModel):
    total_timetables: int
    total_periods: int
    periods_by_day: Dict[str, int]
    teacher_workload: List[TeacherPeriodCount]
