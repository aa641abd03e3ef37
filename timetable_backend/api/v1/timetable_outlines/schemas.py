from datetime import datetime
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from timetable_backend.core.enums import OutlinePeriodType, Weekday
from timetable_backend.api.v1.timetables.slots import check_hhmm


class OutlinePeriodIn(BaseModel):
    name: str = Field(..., max_length=100, description="e.g. Period 1, Break, Lunch")
    start_time: str = Field(..., description="HH:MM, e.g. 07:00")
    end_time: str = Field(..., description="HH:MM, e.g. 07:45")
    type: OutlinePeriodType = OutlinePeriodType.PERIOD

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def parse_time(cls, v: str) -> str:
        return check_hhmm(v)

class OutlinePeriod(OutlinePeriodIn):
    duration: int = Field(..., description="Minutes, derived from start/end")

class TimetableOutlineCreate(BaseModel):
    name: str = Field(..., max_length=255)
    description: Optional[str] = None
    periods: List[OutlinePeriodIn] = Field(default_factory=list)
    day_overrides: Dict[Weekday, List[OutlinePeriodIn]] = Field(
        default_factory=dict,
        description="Optional per-weekday period lists (e.g. a short Saturday)",
    )

class TimetableOutlineUpdate(TimetableOutlineCreate):
    """Full replace: periods and day_overrides are overwritten, not merged."""

class TimetableOutlineResponse(BaseModel):
    id: UUID
    name: str
    description: Optional[str] = None
    periods: List[OutlinePeriod]
    day_overrides: Dict[str, List[OutlinePeriod]] = Field(default_factory=dict)
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
