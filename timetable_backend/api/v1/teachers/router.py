from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from timetable_backend.core.enums import Weekday
from timetable_backend.core.exceptions import ServiceError
from timetable_backend.db.session import get_db

from .schemas import AvailableTeacher, TeacherCreate, TeacherResponse, TeacherScheduleUpdate, TeacherWorkloadResponse
from . import availability, service

router = APIRouter(prefix="/api/v1/teachers", tags=["teachers"])


@router.post("", response_model=TeacherResponse, status_code=status.HTTP_201_CREATED)
async def create_teacher(
    payload: TeacherCreate,
    db: AsyncSession = Depends(get_db),
):
    try:
        return await service.create_teacher(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)


@router.get("", response_model=List[TeacherResponse])
async def list_teachers(db: AsyncSession = Depends(get_db)):
    return await service.list_teachers(db)


@router.get("/availability/subject", response_model=List[AvailableTeacher])
async def available_teachers_for_subject(
    subject_id: UUID,
    day: Weekday,
    start_time: str = Query(..., description="24-hour format, e.g. 09:00"),
    end_time: str = Query(..., description="24-hour format, e.g. 09:45"),
    exclude_class_id: Optional[UUID] = Query(None),
    academic_year: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """All teachers qualified for the subject, free ones first. Booked teachers carry their clashes."""
    try:
        return await availability.find_available_teachers(
            db, subject_id, day.value, start_time, end_time, exclude_class_id, academic_year
        )
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)


@router.get("/{teacher_id}", response_model=TeacherResponse)
async def get_teacher(
    teacher_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    obj = await service.get_teacher(db, teacher_id)
    if not obj:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Teacher not found")
    return obj


@router.get("/{teacher_id}/workload", response_model=TeacherWorkloadResponse)
async def get_teacher_workload(
    teacher_id: UUID,
    academic_year: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    try:
        return await availability.get_teacher_workload(db, teacher_id, academic_year)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)


@router.put("/{teacher_id}/schedule", response_model=TeacherResponse)
async def update_teacher_schedule(
    teacher_id: UUID,
    payload: TeacherScheduleUpdate,
    db: AsyncSession = Depends(get_db),
):
    """Set per-weekday availability and the daily cap. Availability is informational; nothing is blocked by it."""
    try:
        return await service.update_teacher_schedule(db, teacher_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
