import logging
from typing import List, Optional
from uuid import UUID

from fastapi import status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from timetable_backend.core.exceptions import NotFoundError, ServiceError, ValidationError
from timetable_backend.core.models import SchoolClass

from .schemas import ClassCreate, ClassResponse

logger = logging.getLogger(__name__)


def _to_response(c: SchoolClass) -> ClassResponse:
    return ClassResponse(
        id=c.id,
        grade=c.grade,
        division=c.division,
        name=c.display_name,
        created_at=c.created_at,
    )


async def create_class(db: AsyncSession, payload: ClassCreate) -> ClassResponse:
    grade = payload.grade.strip()
    division = payload.division.strip().upper()
    if not grade or not division:
        raise ValidationError("grade and division are required", entity="class")
    try:
        obj = SchoolClass(grade=grade, division=division)
        db.add(obj)
        await db.commit()
        await db.refresh(obj)
    except IntegrityError:
        await db.rollback()
        raise ServiceError(f"Class {grade}{division} already exists", status.HTTP_409_CONFLICT, entity="class")
    logger.info("Created class %s (%s)", obj.display_name, obj.id)
    return _to_response(obj)


async def list_classes(db: AsyncSession) -> List[ClassResponse]:
    result = await db.execute(select(SchoolClass).order_by(SchoolClass.grade, SchoolClass.division))
    return [_to_response(c) for c in result.scalars().all()]


async def get_class(db: AsyncSession, class_id: UUID) -> Optional[ClassResponse]:
    obj = await db.get(SchoolClass, class_id)
    return _to_response(obj) if obj else None


async def require_class(db: AsyncSession, class_id: UUID) -> SchoolClass:
    obj = await db.get(SchoolClass, class_id)
    if not obj:
        raise NotFoundError("Class not found", entity="class")
    return obj
