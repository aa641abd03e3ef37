import logging
from typing import List, Optional
from uuid import UUID

from fastapi import status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from timetable_backend.core.exceptions import NotFoundError, ServiceError, ValidationError
from timetable_backend.core.models import Subject

from .schemas import SubjectCreate, SubjectResponse

logger = logging.getLogger(__name__)


def _to_response(s: Subject) -> SubjectResponse:
    return SubjectResponse(id=s.id, name=s.name, code=s.code, created_at=s.created_at)


async def create_subject(db: AsyncSession, payload: SubjectCreate) -> SubjectResponse:
    name = payload.name.strip()
    code = payload.code.strip().upper()
    if not name or not code:
        raise ValidationError("Subject name and code are required", entity="subject")
    existing = await db.execute(select(Subject).where(Subject.code == code))
    if existing.scalar_one_or_none():
        raise ServiceError(f"Subject code '{code}' already exists", status.HTTP_409_CONFLICT, entity="subject")
    try:
        obj = Subject(name=name, code=code)
        db.add(obj)
        await db.commit()
        await db.refresh(obj)
    except IntegrityError:
        await db.rollback()
        raise ServiceError(f"Subject code '{code}' already exists", status.HTTP_409_CONFLICT, entity="subject")
    logger.info("Created subject %s (%s)", code, obj.id)
    return _to_response(obj)


async def list_subjects(db: AsyncSession) -> List[SubjectResponse]:
    result = await db.execute(select(Subject).order_by(Subject.name))
    return [_to_response(s) for s in result.scalars().all()]


async def get_subject(db: AsyncSession, subject_id: UUID) -> Optional[SubjectResponse]:
    obj = await db.get(Subject, subject_id)
    return _to_response(obj) if obj else None


async def require_subject(db: AsyncSession, subject_id: UUID) -> Subject:
    obj = await db.get(Subject, subject_id)
    if not obj:
        raise NotFoundError("Subject not found", entity="subject")
    return obj
