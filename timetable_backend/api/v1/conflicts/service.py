"""
Double-booking detection across every class's weekly timetable.

Room conflicts block a save unless overridden; teacher conflicts are advisory. The scan reads
other classes' timetables and the caller writes afterwards without isolation, so two concurrent
writers can both pass the check. Conflicts are warnings, not a storage invariant.
"""

from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from timetable_backend.core.enums import ConflictKind
from timetable_backend.core.exceptions import ValidationError
from timetable_backend.core.models import SchoolClass, WeeklyTimetable
from timetable_backend.api.v1.timetables.slots import clean_room, time_window, windows_overlap

from .schemas import ConflictingClass, ConflictingPeriod, ConflictRecord

TimetableRow = Tuple[WeeklyTimetable, SchoolClass]


def candidate_window(start_time: str, end_time: str) -> Tuple[int, int]:
    try:
        return time_window(start_time, end_time)
    except ValueError as e:
        raise ValidationError(str(e), entity="time")


async def load_timetables(
    db: AsyncSession,
    exclude_class_id: Optional[UUID] = None,
    academic_year: Optional[str] = None,
) -> List[TimetableRow]:
    stmt = select(WeeklyTimetable, SchoolClass).join(SchoolClass, SchoolClass.id == WeeklyTimetable.class_id)
    if exclude_class_id is not None:
        stmt = stmt.where(WeeklyTimetable.class_id != exclude_class_id)
    if academic_year:
        stmt = stmt.where(WeeklyTimetable.academic_year == academic_year)
    result = await db.execute(stmt)
    return [(tt, cl) for tt, cl in result.all()]


def _scan(
    rows: Sequence[TimetableRow],
    kind: ConflictKind,
    day: str,
    window: Tuple[int, int],
    matches: Callable[[Dict[str, Any]], bool],
    describe: Callable[[Dict[str, Any], SchoolClass], str],
) -> List[ConflictRecord]:
    conflicts: List[ConflictRecord] = []
    for tt, cl in rows:
        for entry in (tt.weekly_timetable or {}).get(day) or []:
            if not matches(entry):
                continue
            if not windows_overlap(window, time_window(entry["start_time"], entry["end_time"])):
                continue
            conflicts.append(
                ConflictRecord(
                    type=kind,
                    message=describe(entry, cl),
                    conflicting_class=ConflictingClass(id=cl.id, name=cl.display_name),
                    conflicting_period=ConflictingPeriod(day=day, **entry),
                )
            )
    return conflicts


def find_room_conflicts(
    rows: Sequence[TimetableRow],
    day: str,
    start_time: str,
    end_time: str,
    room: Optional[str],
) -> List[ConflictRecord]:
    # A room-less assignment needs no room and is never part of a room clash.
    room = clean_room(room)
    if room is None:
        return []
    window = candidate_window(start_time, end_time)
    return _scan(
        rows,
        ConflictKind.ROOM,
        day,
        window,
        lambda e: bool(e.get("room")) and e.get("room") == room,
        lambda e, cl: (
            f"Room {room} is already occupied by class {cl.display_name} "
            f"on {day} {e['start_time']}-{e['end_time']}"
        ),
    )


def find_teacher_conflicts(
    rows: Sequence[TimetableRow],
    day: str,
    start_time: str,
    end_time: str,
    teacher_id: UUID,
) -> List[ConflictRecord]:
    window = candidate_window(start_time, end_time)
    teacher_key = str(teacher_id)
    return _scan(
        rows,
        ConflictKind.TEACHER,
        day,
        window,
        lambda e: str(e.get("teacher_id")) == teacher_key,
        lambda e, cl: (
            f"Teacher is already scheduled with class {cl.display_name} "
            f"on {day} {e['start_time']}-{e['end_time']}"
        ),
    )


async def check_room_conflict(
    db: AsyncSession,
    day: str,
    start_time: str,
    end_time: str,
    room: Optional[str],
    exclude_class_id: Optional[UUID] = None,
    academic_year: Optional[str] = None,
) -> List[ConflictRecord]:
    candidate_window(start_time, end_time)
    room = clean_room(room)
    if room is None:
        return []
    rows = await load_timetables(db, exclude_class_id, academic_year)
    return find_room_conflicts(rows, day, start_time, end_time, room)


async def check_teacher_availability(
    db: AsyncSession,
    day: str,
    start_time: str,
    end_time: str,
    teacher_id: UUID,
    exclude_class_id: Optional[UUID] = None,
    academic_year: Optional[str] = None,
) -> List[ConflictRecord]:
    candidate_window(start_time, end_time)
    rows = await load_timetables(db, exclude_class_id, academic_year)
    return find_teacher_conflicts(rows, day, start_time, end_time, teacher_id)
