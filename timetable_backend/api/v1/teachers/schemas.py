from datetime import datetime
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from timetable_backend.core.enums import ExperienceLevel, Weekday
from timetable_backend.api.v1.conflicts.schemas import ConflictRecord


class DayAvailability(BaseModel):
    available: bool = True
    max_periods: Optional[int] = Field(None, ge=1, description="Overrides the teacher's daily cap on this weekday")


class TeacherCreate(BaseModel):
    full_name: str = Field(..., max_length=255)
    email: str = Field(..., max_length=255)
    experience_years: Optional[int] = Field(None, ge=0)
    max_periods_per_day: Optional[int] = Field(None, ge=1, description="Leave empty to use the configured default")
    subject_ids: List[UUID] = Field(default_factory=list, description="Subjects the teacher is qualified for")
    availability: Dict[Weekday, DayAvailability] = Field(
        default_factory=dict,
        description="Per-weekday availability; weekdays left out are available",
    )


class TeacherScheduleUpdate(BaseModel):
    """Fields left out are unchanged. A given availability mapping replaces the stored one."""

    availability: Optional[Dict[Weekday, DayAvailability]] = None
    max_periods_per_day: Optional[int] = Field(None, ge=1)


class TeacherResponse(BaseModel):
    id: UUID
    full_name: str
    email: str
    experience_years: Optional[int] = None
    max_periods_per_day: Optional[int] = None
    subject_ids: List[UUID] = Field(default_factory=list)
    availability: Dict[str, DayAvailability] = Field(default_factory=dict)
    created_at: datetime

    class Config:
        from_attributes = True


class WorkloadStats(BaseModel):
    total_current_periods: int
    periods_on_day: int
    workload_by_day: Dict[str, int]


class AvailableTeacher(BaseModel):
    """A qualified teacher for a slot. Booked or off-day teachers are listed too; caps are informational."""

    id: UUID
    full_name: str
    email: str
    experience_years: Optional[int] = None
    experience_level: Optional[ExperienceLevel] = None
    max_periods_per_day: int
    day_available: bool = True
    day_max_periods: int
    unavailable_reason: Optional[str] = None
    is_booked: bool
    conflicting_assignments: List[ConflictRecord] = Field(default_factory=list)
    workload_stats: WorkloadStats


class TeacherWorkloadResponse(BaseModel):
    teacher_id: UUID
    total_current_periods: int
    max_periods_per_day: int
    workload_by_day: Dict[str, int]
    availability: Dict[str, DayAvailability] = Field(default_factory=dict)
    classes_taught: List[UUID]
    subjects_taught: List[UUID]
    utilization_percentage: int
