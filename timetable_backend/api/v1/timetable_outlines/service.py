import logging
from typing import Any, Dict, List, Optional, Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from timetable_backend.core.exceptions import ConflictError, NotFoundError, ValidationError
from timetable_backend.core.models import TimetableOutline
from timetable_backend.api.v1.timetables.slots import period_duration

from .schemas import OutlinePeriod, OutlinePeriodIn, TimetableOutlineCreate, TimetableOutlineResponse, TimetableOutlineUpdate

logger = logging.getLogger(__name__)


def _to_response(o: TimetableOutline) -> TimetableOutlineResponse:
    return TimetableOutlineResponse(
        id=o.id,
        name=o.name,
        description=o.description,
        periods=[OutlinePeriod(**p) for p in o.periods or []],
        day_overrides={day: [OutlinePeriod(**p) for p in periods] for day, periods in (o.day_overrides or {}).items()},
        created_at=o.created_at,
        updated_at=o.updated_at,
    )


def _build_periods(periods: Sequence[OutlinePeriodIn], label: str) -> List[Dict[str, Any]]:
    """Periods in submitted order with durations attached. Times are already checked by OutlinePeriodIn."""
    built: List[Dict[str, Any]] = []
    for index, p in enumerate(periods, start=1):
        name = (p.name or "").strip()
        if not name:
            raise ValidationError(f"{label} #{index}: name is required", entity="outline_period")
        built.append(
            OutlinePeriod(
                name=name,
                start_time=p.start_time,
                end_time=p.end_time,
                type=p.type,
                duration=period_duration(p.start_time, p.end_time),
            ).model_dump(mode="json")
        )
    return built


def _build_fields(payload: TimetableOutlineCreate) -> Dict[str, Any]:
    name = (payload.name or "").strip()
    if not name:
        raise ValidationError("Outline name is required", entity="outline")
    overrides = {
        getattr(day, "value", day): _build_periods(periods, f"{getattr(day, 'value', day)} period")
        for day, periods in (payload.day_overrides or {}).items()
    }
    return {
        "name": name,
        "description": payload.description.strip() if payload.description else None,
        "periods": _build_periods(payload.periods, "Period"),
        "day_overrides": overrides,
    }


async def _ensure_name_free(db: AsyncSession, name: str, exclude_id: Optional[UUID] = None) -> None:
    stmt = select(TimetableOutline.id).where(TimetableOutline.name == name)
    if exclude_id is not None:
        stmt = stmt.where(TimetableOutline.id != exclude_id)
    result = await db.execute(stmt)
    if result.scalar_one_or_none() is not None:
        raise ConflictError(f"Timetable outline '{name}' already exists", entity="outline")


async def create_outline(db: AsyncSession, payload: TimetableOutlineCreate) -> TimetableOutlineResponse:
    fields = _build_fields(payload)
    await _ensure_name_free(db, fields["name"])
    try:
        obj = TimetableOutline(**fields)
        db.add(obj)
        await db.commit()
        await db.refresh(obj)
    except IntegrityError:
        await db.rollback()
        raise ConflictError(f"Timetable outline '{fields['name']}' already exists", entity="outline")
    logger.info("Created timetable outline %r (%s) with %d periods", obj.name, obj.id, len(obj.periods))
    return _to_response(obj)


async def list_outlines(db: AsyncSession) -> List[TimetableOutlineResponse]:
    result = await db.execute(select(TimetableOutline))
    return [_to_response(o) for o in result.scalars().all()]


async def get_outline_row(db: AsyncSession, outline_id: UUID) -> TimetableOutline:
    obj = await db.get(TimetableOutline, outline_id)
    if not obj:
        raise NotFoundError("Timetable outline not found", entity="outline")
    return obj


async def get_outline(db: AsyncSession, outline_id: UUID) -> TimetableOutlineResponse:
    return _to_response(await get_outline_row(db, outline_id))


async def update_outline(
    db: AsyncSession,
    outline_id: UUID,
    payload: TimetableOutlineUpdate,
) -> TimetableOutlineResponse:
    obj = await get_outline_row(db, outline_id)
    fields = _build_fields(payload)
    await _ensure_name_free(db, fields["name"], exclude_id=outline_id)
    for key, value in fields.items():
        setattr(obj, key, value)
    try:
        await db.commit()
        await db.refresh(obj)
    except IntegrityError:
        await db.rollback()
        raise ConflictError(f"Timetable outline '{fields['name']}' already exists", entity="outline")
    logger.info("Updated timetable outline %r (%s)", obj.name, obj.id)
    return _to_response(obj)


async def delete_outline(db: AsyncSession, outline_id: UUID) -> None:
    """Timetables built from this outline keep their outline_id; it is only a soft reference."""
    obj = await get_outline_row(db, outline_id)
    await db.delete(obj)
    await db.commit()
    logger.info("Deleted timetable outline %r (%s)", obj.name, outline_id)
