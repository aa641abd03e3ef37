from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class ClassCreate(BaseModel):
    grade: str = Field(..., min_length=1, max_length=20, description="e.g. 10")
    division: str = Field(..., min_length=1, max_length=20, description="e.g. A")


class ClassResponse(BaseModel):
    id: UUID
    grade: str
    division: str
    name: str = Field(..., description="Display name, grade followed by division (e.g. 10A)")
    created_at: datetime

    class Config:
        from_attributes = True
