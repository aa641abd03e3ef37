from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from timetable_backend.core.enums import Weekday
from timetable_backend.core.exceptions import ServiceError
from timetable_backend.db.session import get_db

from .schemas import ConflictCheckResponse
from . import service

router = APIRouter(prefix="/api/v1/conflicts", tags=["conflicts"])


@router.get("/room", response_model=ConflictCheckResponse)
async def check_room_conflict(
    day: Weekday,
    start_time: str = Query(..., description="24-hour format, e.g. 09:00"),
    end_time: str = Query(..., description="24-hour format, e.g. 09:45"),
    room: Optional[str] = Query(None),
    exclude_class_id: Optional[UUID] = Query(None),
    academic_year: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    try:
        conflicts = await service.check_room_conflict(
            db, day.value, start_time, end_time, room, exclude_class_id, academic_year
        )
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    return ConflictCheckResponse(is_available=not conflicts, blocking=bool(conflicts), conflicts=conflicts)


@router.get("/teacher", response_model=ConflictCheckResponse)
async def check_teacher_availability(
    day: Weekday,
    teacher_id: UUID,
    start_time: str = Query(..., description="24-hour format, e.g. 09:00"),
    end_time: str = Query(..., description="24-hour format, e.g. 09:45"),
    exclude_class_id: Optional[UUID] = Query(None),
    academic_year: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """Teacher double-bookings are reported but never block (`blocking` is always false)."""
    try:
        conflicts = await service.check_teacher_availability(
            db, day.value, start_time, end_time, teacher_id, exclude_class_id, academic_year
        )
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    return ConflictCheckResponse(is_available=not conflicts, blocking=False, conflicts=conflicts)
