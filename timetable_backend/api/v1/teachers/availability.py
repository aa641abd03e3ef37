"""
Teacher availability for a timetable slot.

Every teacher qualified for the subject is returned. Teachers already teaching elsewhere in the
window are flagged `is_booked` with the clashing assignments, not filtered out, so a caller can
still double-book knowingly. A teacher marked unavailable on the weekday is listed with
`day_available` false and a reason. Workload numbers and the daily caps are for display only.
"""

from typing import Dict, List, Optional, Sequence, Set
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from timetable_backend.core.config import settings
from timetable_backend.core.enums import WEEKDAYS, ExperienceLevel
from timetable_backend.core.models import Teacher
from timetable_backend.api.v1.conflicts import service as conflicts_service
from timetable_backend.api.v1.conflicts.service import TimetableRow
from timetable_backend.api.v1.subjects import service as subjects_service

from . import service as teachers_service
from .schemas import AvailableTeacher, DayAvailability, TeacherWorkloadResponse, WorkloadStats


def experience_level(years: Optional[int]) -> Optional[ExperienceLevel]:
    if years is None:
        return None
    if years < 2:
        return ExperienceLevel.BEGINNER
    if years <= 5:
        return ExperienceLevel.INTERMEDIATE
    if years <= 10:
        return ExperienceLevel.EXPERIENCED
    return ExperienceLevel.SENIOR


NOT_AVAILABLE_ON_DAY = "Teacher not available on this day"


def day_availability(teacher: Teacher, day: str) -> DayAvailability:
    entry = (teacher.availability or {}).get(day)
    return DayAvailability(**entry) if entry else DayAvailability()


def max_periods_for(teacher: Teacher, day: Optional[str] = None) -> int:
    """Daily cap: the weekday's own cap, then the teacher's, then the configured default."""
    if day is not None:
        per_day = day_availability(teacher, day).max_periods
        if per_day:
            return per_day
    return teacher.max_periods_per_day or settings.default_max_periods_per_day


def workload_by_day(rows: Sequence[TimetableRow], teacher_id: UUID) -> Dict[str, int]:
    key = str(teacher_id)
    counts = {day: 0 for day in WEEKDAYS}
    for tt, _ in rows:
        for day in WEEKDAYS:
            counts[day] += sum(1 for e in (tt.weekly_timetable or {}).get(day) or [] if str(e.get("teacher_id")) == key)
    return counts


async def find_available_teachers(
    db: AsyncSession,
    subject_id: UUID,
    day: str,
    start_time: str,
    end_time: str,
    exclude_class_id: Optional[UUID] = None,
    academic_year: Optional[str] = None,
) -> List[AvailableTeacher]:
    await subjects_service.require_subject(db, subject_id)
    conflicts_service.candidate_window(start_time, end_time)
    teachers = await teachers_service.list_teachers_qualified_for(db, subject_id)
    if not teachers:
        return []

    # Workload spans every class; the clash scan skips the class being edited.
    all_rows = await conflicts_service.load_timetables(db, academic_year=academic_year)
    scan_rows = [(tt, cl) for tt, cl in all_rows if exclude_class_id is None or tt.class_id != exclude_class_id]

    results: List[AvailableTeacher] = []
    for teacher in teachers:
        clashes = conflicts_service.find_teacher_conflicts(scan_rows, day, start_time, end_time, teacher.id)
        by_day = workload_by_day(all_rows, teacher.id)
        on_day = day_availability(teacher, day)
        results.append(
            AvailableTeacher(
                id=teacher.id,
                full_name=teacher.full_name,
                email=teacher.email,
                experience_years=teacher.experience_years,
                experience_level=experience_level(teacher.experience_years),
                max_periods_per_day=max_periods_for(teacher),
                day_available=on_day.available,
                day_max_periods=max_periods_for(teacher, day),
                unavailable_reason=None if on_day.available else NOT_AVAILABLE_ON_DAY,
                is_booked=bool(clashes),
                conflicting_assignments=clashes,
                workload_stats=WorkloadStats(
                    total_current_periods=sum(by_day.values()),
                    periods_on_day=by_day.get(day, 0),
                    workload_by_day=by_day,
                ),
            )
        )
    results.sort(key=lambda t: (t.is_booked, not t.day_available, t.full_name.lower()))
    return results


async def get_teacher_workload(
    db: AsyncSession,
    teacher_id: UUID,
    academic_year: Optional[str] = None,
) -> TeacherWorkloadResponse:
    teacher = await teachers_service.require_teacher(db, teacher_id)
    rows = await conflicts_service.load_timetables(db, academic_year=academic_year)
    key = str(teacher_id)
    classes: Set[UUID] = set()
    subjects: Set[UUID] = set()
    for tt, cl in rows:
        for day in WEEKDAYS:
            for e in (tt.weekly_timetable or {}).get(day) or []:
                if str(e.get("teacher_id")) == key:
                    classes.add(cl.id)
                    subjects.add(UUID(str(e["subject_id"])))
    by_day = workload_by_day(rows, teacher_id)
    total = sum(by_day.values())
    max_per_day = max_periods_for(teacher)
    return TeacherWorkloadResponse(
        teacher_id=teacher_id,
        total_current_periods=total,
        max_periods_per_day=max_per_day,
        workload_by_day=by_day,
        availability={day: day_availability(teacher, day) for day in WEEKDAYS},
        classes_taught=sorted(classes, key=str),
        subjects_taught=sorted(subjects, key=str),
        utilization_percentage=round(total / (max_per_day * len(WEEKDAYS)) * 100),
    )
