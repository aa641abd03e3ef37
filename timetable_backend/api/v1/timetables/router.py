from typing import Dict, List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from timetable_backend.core.enums import Weekday
from timetable_backend.core.exceptions import ServiceError
from timetable_backend.db.session import get_db

from .schemas import (
    ClassTimetableResponse,
    PeriodAssign,
    PeriodAssignment,
    PeriodAssignResponse,
    TeacherTimetableResponse,
    TimetableClearResponse,
    TimetableSave,
    TimetableSaveResponse,
    TimetableStatsResponse,
)
from . import service

router = APIRouter(prefix="/api/v1/timetables", tags=["timetables"])


@router.get("/class/{class_id}", response_model=ClassTimetableResponse)
async def get_class_timetable(
    class_id: UUID,
    academic_year: str = Query(..., description="e.g. 2025"),
    semester: str = Query("1"),
    db: AsyncSession = Depends(get_db),
):
    """Weekly grid plus the slot list derived from the class outline (or the default day)."""
    try:
        return await service.get_timetable_for_class(db, class_id, academic_year, semester)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)


@router.post("/class/{class_id}", response_model=TimetableSaveResponse)
async def save_class_timetable(
    class_id: UUID,
    payload: TimetableSave,
    db: AsyncSession = Depends(get_db),
):
    """Replace the whole week. Room conflicts fail with 409 unless override_conflicts is set."""
    try:
        return await service.save_timetable(db, class_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)


@router.delete("/class/{class_id}", response_model=TimetableClearResponse)
async def clear_class_timetable(
    class_id: UUID,
    academic_year: str = Query(...),
    db: AsyncSession = Depends(get_db),
):
    try:
        return await service.clear_timetable(db, class_id, academic_year)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)


@router.post("/class/{class_id}/periods", response_model=PeriodAssignResponse)
async def assign_period(
    class_id: UUID,
    payload: PeriodAssign,
    db: AsyncSession = Depends(get_db),
):
    """Room conflicts come back as warnings with applied=false; resend with override_conflicts to force."""
    try:
        return await service.assign_period(db, class_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)


@router.delete("/class/{class_id}/periods/{day}/{period_number}", response_model=Dict[str, List[PeriodAssignment]])
async def remove_period(
    class_id: UUID,
    day: Weekday,
    period_number: int,
    academic_year: str = Query(...),
    semester: str = Query("1"),
    db: AsyncSession = Depends(get_db),
):
    try:
        return await service.remove_period(db, class_id, academic_year, semester, day.value, period_number)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)


@router.get("/teacher/{teacher_id}", response_model=TeacherTimetableResponse)
async def get_teacher_timetable(
    teacher_id: UUID,
    academic_year: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    try:
        return await service.get_teacher_timetable(db, teacher_id, academic_year)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)


@router.get("/stats/overview", response_model=TimetableStatsResponse)
async def get_timetable_stats(
    academic_year: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    return await service.get_timetable_stats(db, academic_year)
