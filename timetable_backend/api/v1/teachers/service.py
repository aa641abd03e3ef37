import logging
from typing import Any, Dict, List, Mapping, Optional
from uuid import UUID

from fastapi import status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from timetable_backend.core.exceptions import NotFoundError, ServiceError, ValidationError
from timetable_backend.core.models import Subject, Teacher, teacher_subjects

from .schemas import DayAvailability, TeacherCreate, TeacherResponse, TeacherScheduleUpdate

logger = logging.getLogger(__name__)


def _dump_availability(availability: Mapping[Any, DayAvailability]) -> Dict[str, Dict[str, Any]]:
    return {getattr(day, "value", day): entry.model_dump() for day, entry in availability.items()}


def _to_response(t: Teacher) -> TeacherResponse:
    return TeacherResponse(
        id=t.id,
        full_name=t.full_name,
        email=t.email,
        experience_years=t.experience_years,
        max_periods_per_day=t.max_periods_per_day,
        subject_ids=[s.id for s in t.subjects],
        availability={day: DayAvailability(**v) for day, v in (t.availability or {}).items()},
        created_at=t.created_at,
    )


async def create_teacher(db: AsyncSession, payload: TeacherCreate) -> TeacherResponse:
    full_name = payload.full_name.strip()
    email = payload.email.strip().lower()
    if not full_name or not email:
        raise ValidationError("Teacher name and email are required", entity="teacher")
    subject_ids = set(payload.subject_ids)
    subjects: List[Subject] = []
    if subject_ids:
        result = await db.execute(select(Subject).where(Subject.id.in_(list(subject_ids))))
        subjects = list(result.scalars().all())
        if len(subjects) != len(subject_ids):
            raise NotFoundError("One or more subjects not found", entity="subject")
    obj = Teacher(
        full_name=full_name,
        email=email,
        experience_years=payload.experience_years,
        max_periods_per_day=payload.max_periods_per_day,
        availability=_dump_availability(payload.availability),
        subjects=subjects,
    )
    try:
        db.add(obj)
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ServiceError(f"Teacher with email {email} already exists", status.HTTP_409_CONFLICT, entity="teacher")
    logger.info("Created teacher %s (%s) qualified for %d subject(s)", full_name, obj.id, len(subjects))
    return _to_response(obj)


async def list_teachers(db: AsyncSession) -> List[TeacherResponse]:
    result = await db.execute(select(Teacher).order_by(Teacher.full_name))
    return [_to_response(t) for t in result.scalars().all()]


async def get_teacher(db: AsyncSession, teacher_id: UUID) -> Optional[TeacherResponse]:
    obj = await db.get(Teacher, teacher_id)
    return _to_response(obj) if obj else None


async def require_teacher(db: AsyncSession, teacher_id: UUID) -> Teacher:
    obj = await db.get(Teacher, teacher_id)
    if not obj:
        raise NotFoundError("Teacher not found", entity="teacher")
    return obj


async def list_teachers_qualified_for(db: AsyncSession, subject_id: UUID) -> List[Teacher]:
    result = await db.execute(
        select(Teacher)
        .join(teacher_subjects, teacher_subjects.c.teacher_id == Teacher.id)
        .where(teacher_subjects.c.subject_id == subject_id)
        .order_by(Teacher.full_name)
    )
    return list(result.scalars().unique().all())


async def update_teacher_schedule(
    db: AsyncSession,
    teacher_id: UUID,
    payload: TeacherScheduleUpdate,
) -> TeacherResponse:
    obj = await require_teacher(db, teacher_id)
    if payload.availability is not None:
        obj.availability = _dump_availability(payload.availability)
    if payload.max_periods_per_day is not None:
        obj.max_periods_per_day = payload.max_periods_per_day
    await db.commit()
    off_days = sorted(day for day, entry in (obj.availability or {}).items() if not entry.get("available", True))
    logger.info(
        "Updated schedule for teacher %s (%s): cap %s, unavailable on %s",
        obj.full_name, obj.id, obj.max_periods_per_day, ", ".join(off_days) or "no days",
    )
    return _to_response(obj)
