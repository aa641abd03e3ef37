"""
Weekly timetable builder.

A class's week for one academic year/semester is a single row whose JSON document maps each
weekday to its ordered periods. Every mutation reads the document, edits a copy and writes the
whole mapping back in one commit, so multi-day edits never land partially.
"""

import logging
from collections import Counter
from typing import Any, Dict, List, Optional, Sequence, Tuple
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from timetable_backend.core.enums import WEEKDAYS
from timetable_backend.core.exceptions import ConflictError, ConstraintError, NotFoundError, ValidationError
from timetable_backend.core.models import Subject, Teacher, TimetableOutline, WeeklyTimetable
from timetable_backend.api.v1.classes import service as classes_service
from timetable_backend.api.v1.conflicts import service as conflicts_service
from timetable_backend.api.v1.conflicts.schemas import ConflictRecord
from timetable_backend.api.v1.subjects import service as subjects_service
from timetable_backend.api.v1.teachers import service as teachers_service
from timetable_backend.api.v1.timetable_outlines import service as outlines_service

from .schemas import (
    ClassTimetableResponse,
    PeriodAssign,
    PeriodAssignment,
    PeriodAssignResponse,
    TeacherPeriodCount,
    TeacherTimetableEntry,
    TeacherTimetableResponse,
    TimetableClearResponse,
    TimetableSave,
    TimetableSaveResponse,
    TimetableStatsResponse,
)
from .slots import Slot, find_slot, resolve_slots, time_window

logger = logging.getLogger(__name__)

Grid = Dict[str, List[Dict[str, Any]]]


def _normalize_grid(raw: Optional[Dict[str, Any]]) -> Grid:
    """All six weekdays present, entries copied and ordered by period_number."""
    raw = raw or {}
    return {
        day: sorted((dict(e) for e in raw.get(day) or []), key=lambda e: e["period_number"])
        for day in WEEKDAYS
    }


def _is_populated(grid: Grid) -> bool:
    return any(grid.get(day) for day in WEEKDAYS)


def _count_periods(grid: Grid) -> int:
    return sum(len(entries) for entries in grid.values())


def _grid_response(grid: Grid) -> Dict[str, List[PeriodAssignment]]:
    return {day: [PeriodAssignment(**e) for e in grid.get(day, [])] for day in WEEKDAYS}


def _day_value(day: Any) -> str:
    return getattr(day, "value", day)


async def _get_aggregate(
    db: AsyncSession,
    class_id: UUID,
    academic_year: str,
    semester: str,
) -> Optional[WeeklyTimetable]:
    result = await db.execute(
        select(WeeklyTimetable).where(
            WeeklyTimetable.class_id == class_id,
            WeeklyTimetable.academic_year == academic_year,
            WeeklyTimetable.semester == semester,
        )
    )
    return result.scalar_one_or_none()


async def _load_outline(db: AsyncSession, outline_id: Optional[UUID]) -> Optional[TimetableOutline]:
    """Soft reference: a deleted outline resolves to None and the default slots apply."""
    if outline_id is None:
        return None
    return await db.get(TimetableOutline, outline_id)


async def _select_outline(
    db: AsyncSession,
    aggregate: Optional[WeeklyTimetable],
    requested_outline_id: Optional[UUID],
) -> Tuple[Optional[TimetableOutline], Optional[UUID]]:
    """
    Outline to build against. Omitting the id keeps the stored one. Switching to another outline
    is refused while any period is assigned; clear_timetable unlocks it.
    """
    current_id = aggregate.outline_id if aggregate else None
    if requested_outline_id is None or requested_outline_id == current_id:
        return await _load_outline(db, current_id), current_id
    if aggregate is not None and _is_populated(_normalize_grid(aggregate.weekly_timetable)):
        raise ConstraintError(
            "Outline cannot be changed while periods are assigned; clear the timetable first",
            entity="outline",
        )
    outline = await outlines_service.get_outline_row(db, requested_outline_id)
    return outline, outline.id


def _day_slots(outline: Optional[TimetableOutline]) -> Dict[str, List[Slot]]:
    if outline is None:
        return {}
    return {day: resolve_slots(outline, day) for day in WEEKDAYS if (outline.day_overrides or {}).get(day)}


def _tag(conflicts: Sequence[ConflictRecord], day: str, period_number: int) -> List[ConflictRecord]:
    return [c.model_copy(update={"day": day, "period_number": period_number}) for c in conflicts]


async def _persist(
    db: AsyncSession,
    aggregate: Optional[WeeklyTimetable],
    class_id: UUID,
    academic_year: str,
    semester: str,
    grid: Grid,
    outline_id: Optional[UUID],
) -> WeeklyTimetable:
    if aggregate is None:
        aggregate = WeeklyTimetable(
            class_id=class_id,
            academic_year=academic_year,
            semester=semester,
            outline_id=outline_id,
            weekly_timetable=grid,
        )
        db.add(aggregate)
    else:
        aggregate.weekly_timetable = grid
        aggregate.outline_id = outline_id
    try:
        await db.commit()
        await db.refresh(aggregate)
    except IntegrityError:
        await db.rollback()
        raise ConflictError(
            "Timetable for this class was created concurrently; reload and retry",
            entity="timetable",
        )
    return aggregate


async def get_timetable_for_class(
    db: AsyncSession,
    class_id: UUID,
    academic_year: str,
    semester: str = "1",
) -> ClassTimetableResponse:
    cl = await classes_service.require_class(db, class_id)
    aggregate = await _get_aggregate(db, class_id, academic_year, semester)
    grid = _normalize_grid(aggregate.weekly_timetable if aggregate else None)
    outline_id = aggregate.outline_id if aggregate else None
    outline = await _load_outline(db, outline_id)
    return ClassTimetableResponse(
        class_id=class_id,
        class_name=cl.display_name,
        academic_year=academic_year,
        semester=semester,
        outline_id=outline_id,
        is_locked=_is_populated(grid),
        weekly_timetable=_grid_response(grid),
        slots=resolve_slots(outline),
        day_slots=_day_slots(outline),
        updated_at=aggregate.updated_at if aggregate else None,
    )


async def assign_period(
    db: AsyncSession,
    class_id: UUID,
    payload: PeriodAssign,
) -> PeriodAssignResponse:
    cl = await classes_service.require_class(db, class_id)
    await subjects_service.require_subject(db, payload.subject_id)
    await teachers_service.require_teacher(db, payload.teacher_id)

    day = _day_value(payload.day)
    number = payload.period_number
    aggregate = await _get_aggregate(db, class_id, payload.academic_year, payload.semester)
    grid = _normalize_grid(aggregate.weekly_timetable if aggregate else None)
    outline, outline_id = await _select_outline(db, aggregate, payload.outline_id)

    slot = find_slot(resolve_slots(outline, day), number)
    if slot is None:
        raise ValidationError(f"Period {number} does not exist in the {day} schedule", entity="period")
    if slot.is_break:
        raise ConstraintError(f"{day} period {number} ({slot.name}) is a break and cannot be assigned", entity="period")

    targets: List[Tuple[str, Slot]] = [(day, slot)]
    if payload.apply_all_days:
        targets = []
        for d in WEEKDAYS:
            s = find_slot(resolve_slots(outline, d), number)
            if s is not None and not s.is_break:
                targets.append((d, s))

    rows = await conflicts_service.load_timetables(db, exclude_class_id=class_id, academic_year=payload.academic_year)
    room_conflicts: List[ConflictRecord] = []
    teacher_conflicts: List[ConflictRecord] = []
    for d, s in targets:
        room_conflicts += _tag(
            conflicts_service.find_room_conflicts(rows, d, s.start_time, s.end_time, payload.room), d, number
        )
        teacher_conflicts += _tag(
            conflicts_service.find_teacher_conflicts(rows, d, s.start_time, s.end_time, payload.teacher_id), d, number
        )
    warnings = room_conflicts + teacher_conflicts

    if room_conflicts and not payload.override_conflicts:
        logger.warning(
            "Room conflict for class %s period %s on %s: %d clash(es); not applied",
            cl.display_name, number, ", ".join(d for d, _ in targets), len(room_conflicts),
        )
        return PeriodAssignResponse(
            applied=False,
            day=day,
            period_number=number,
            weekly_timetable=_grid_response(grid),
            warnings=warnings,
        )
    if room_conflicts:
        logger.warning(
            "Overriding %d room conflict(s) for class %s period %s", len(room_conflicts), cl.display_name, number
        )

    for d, s in targets:
        entry = PeriodAssignment(
            period_number=number,
            subject_id=payload.subject_id,
            teacher_id=payload.teacher_id,
            start_time=s.start_time,
            end_time=s.end_time,
            room=payload.room,
            type=payload.type,
        ).model_dump(mode="json")
        kept = [e for e in grid[d] if e["period_number"] != number]
        grid[d] = sorted(kept + [entry], key=lambda e: e["period_number"])

    await _persist(db, aggregate, class_id, payload.academic_year, payload.semester, grid, outline_id)
    logger.info(
        "Assigned period %s for class %s (%s/%s) on %s",
        number, cl.display_name, payload.academic_year, payload.semester, ", ".join(d for d, _ in targets),
    )
    return PeriodAssignResponse(
        applied=True,
        day=day,
        period_number=number,
        applied_days=[d for d, _ in targets],
        weekly_timetable=_grid_response(grid),
        warnings=warnings,
    )


async def remove_period(
    db: AsyncSession,
    class_id: UUID,
    academic_year: str,
    semester: str,
    day: str,
    period_number: int,
) -> Dict[str, List[PeriodAssignment]]:
    """Drop one entry from a day. Missing entries are a no-op."""
    await classes_service.require_class(db, class_id)
    day = _day_value(day)
    aggregate = await _get_aggregate(db, class_id, academic_year, semester)
    grid = _normalize_grid(aggregate.weekly_timetable if aggregate else None)
    kept = [e for e in grid[day] if e["period_number"] != period_number]
    if aggregate is None or len(kept) == len(grid[day]):
        return _grid_response(grid)
    grid[day] = kept
    await _persist(db, aggregate, class_id, academic_year, semester, grid, aggregate.outline_id)
    logger.info("Removed period %s on %s for class %s (%s/%s)", period_number, day, class_id, academic_year, semester)
    return _grid_response(grid)


async def _check_references(db: AsyncSession, entries: Sequence[PeriodAssignment]) -> None:
    subject_ids = {e.subject_id for e in entries}
    teacher_ids = {e.teacher_id for e in entries}
    if subject_ids:
        found = await db.execute(select(Subject.id).where(Subject.id.in_(list(subject_ids))))
        missing = subject_ids - set(found.scalars().all())
        if missing:
            raise NotFoundError(f"Subject not found: {', '.join(sorted(str(m) for m in missing))}", entity="subject")
    if teacher_ids:
        found = await db.execute(select(Teacher.id).where(Teacher.id.in_(list(teacher_ids))))
        missing = teacher_ids - set(found.scalars().all())
        if missing:
            raise NotFoundError(f"Teacher not found: {', '.join(sorted(str(m) for m in missing))}", entity="teacher")


async def save_timetable(
    db: AsyncSession,
    class_id: UUID,
    payload: TimetableSave,
) -> TimetableSaveResponse:
    cl = await classes_service.require_class(db, class_id)

    submitted: Dict[str, List[PeriodAssignment]] = {
        _day_value(day): list(entries) for day, entries in (payload.weekly_timetable or {}).items()
    }
    for day, entries in submitted.items():
        dupes = sorted(n for n, count in Counter(e.period_number for e in entries).items() if count > 1)
        if dupes:
            raise ValidationError(
                f"{day} has more than one entry for period(s) {', '.join(str(n) for n in dupes)}",
                entity="period",
            )
    await _check_references(db, [e for entries in submitted.values() for e in entries])

    aggregate = await _get_aggregate(db, class_id, payload.academic_year, payload.semester)
    outline, outline_id = await _select_outline(db, aggregate, payload.outline_id)

    # Stored times always follow the slot; submitted times are replaced.
    for day, entries in submitted.items():
        slots = resolve_slots(outline, day)
        placed: List[PeriodAssignment] = []
        for e in entries:
            slot = find_slot(slots, e.period_number)
            if slot is None:
                raise ValidationError(f"Period {e.period_number} does not exist in the {day} schedule", entity="period")
            if slot.is_break:
                raise ConstraintError(
                    f"{day} period {e.period_number} ({slot.name}) is a break and cannot be assigned",
                    entity="period",
                )
            placed.append(e.model_copy(update={"start_time": slot.start_time, "end_time": slot.end_time}))
        submitted[day] = placed

    rows = await conflicts_service.load_timetables(db, exclude_class_id=class_id, academic_year=payload.academic_year)
    room_conflicts: List[ConflictRecord] = []
    teacher_conflicts: List[ConflictRecord] = []
    for day, entries in submitted.items():
        for e in entries:
            room_conflicts += _tag(
                conflicts_service.find_room_conflicts(rows, day, e.start_time, e.end_time, e.room), day, e.period_number
            )
            teacher_conflicts += _tag(
                conflicts_service.find_teacher_conflicts(rows, day, e.start_time, e.end_time, e.teacher_id),
                day,
                e.period_number,
            )

    if room_conflicts and not payload.override_conflicts:
        logger.warning("Timetable save for class %s rejected: %d room conflict(s)", cl.display_name, len(room_conflicts))
        raise ConflictError("Timetable conflicts detected", conflicts=room_conflicts, entity="timetable")
    if room_conflicts:
        logger.warning("Saving class %s timetable over %d room conflict(s)", cl.display_name, len(room_conflicts))

    grid = _normalize_grid(
        {day: [e.model_dump(mode="json") for e in entries] for day, entries in submitted.items()}
    )
    await _persist(db, aggregate, class_id, payload.academic_year, payload.semester, grid, outline_id)
    total = _count_periods(grid)
    logger.info(
        "Saved timetable for class %s (%s/%s): %d periods", cl.display_name, payload.academic_year, payload.semester, total
    )
    return TimetableSaveResponse(
        class_id=class_id,
        academic_year=payload.academic_year,
        semester=payload.semester,
        outline_id=outline_id,
        total_periods=total,
        weekly_timetable=_grid_response(grid),
        warnings=room_conflicts + teacher_conflicts,
    )


async def clear_timetable(
    db: AsyncSession,
    class_id: UUID,
    academic_year: str,
) -> TimetableClearResponse:
    """Remove every semester's timetable for the class and year; also drops the outline selection."""
    await classes_service.require_class(db, class_id)
    result = await db.execute(
        select(WeeklyTimetable).where(
            WeeklyTimetable.class_id == class_id,
            WeeklyTimetable.academic_year == academic_year,
        )
    )
    rows = result.scalars().all()
    for row in rows:
        await db.delete(row)
    await db.commit()
    logger.info("Cleared %d timetable(s) for class %s, academic year %s", len(rows), class_id, academic_year)
    return TimetableClearResponse(class_id=class_id, academic_year=academic_year, deleted=len(rows))


async def get_teacher_timetable(
    db: AsyncSession,
    teacher_id: UUID,
    academic_year: Optional[str] = None,
) -> TeacherTimetableResponse:
    await teachers_service.require_teacher(db, teacher_id)
    rows = await conflicts_service.load_timetables(db, academic_year=academic_year)
    key = str(teacher_id)
    week: Dict[str, List[TeacherTimetableEntry]] = {day: [] for day in WEEKDAYS}
    for tt, cl in rows:
        grid = _normalize_grid(tt.weekly_timetable)
        for day in WEEKDAYS:
            for e in grid[day]:
                if str(e.get("teacher_id")) != key:
                    continue
                week[day].append(
                    TeacherTimetableEntry(
                        **e,
                        class_id=cl.id,
                        class_name=cl.display_name,
                        academic_year=tt.academic_year,
                        semester=tt.semester,
                    )
                )
    for day in WEEKDAYS:
        week[day].sort(key=lambda p: (time_window(p.start_time, p.end_time), p.period_number))
    return TeacherTimetableResponse(teacher_id=teacher_id, academic_year=academic_year, weekly_timetable=week)


async def get_timetable_stats(
    db: AsyncSession,
    academic_year: Optional[str] = None,
) -> TimetableStatsResponse:
    rows = await conflicts_service.load_timetables(db, academic_year=academic_year)
    by_day = {day: 0 for day in WEEKDAYS}
    per_teacher: Counter = Counter()
    for tt, _ in rows:
        grid = _normalize_grid(tt.weekly_timetable)
        for day in WEEKDAYS:
            by_day[day] += len(grid[day])
            per_teacher.update(str(e["teacher_id"]) for e in grid[day])

    names: Dict[str, str] = {}
    if per_teacher:
        result = await db.execute(
            select(Teacher.id, Teacher.full_name).where(Teacher.id.in_([UUID(t) for t in per_teacher]))
        )
        names = {str(tid): name for tid, name in result.all()}
    workload = [
        TeacherPeriodCount(teacher_id=UUID(tid), teacher_name=names.get(tid), periods=count)
        for tid, count in per_teacher.most_common()
    ]
    return TimetableStatsResponse(
        total_timetables=len(rows),
        total_periods=sum(by_day.values()),
        periods_by_day=by_day,
        teacher_workload=workload,
    )
