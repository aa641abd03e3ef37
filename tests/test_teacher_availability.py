from types import SimpleNamespace
from uuid import uuid4

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from timetable_backend.core.enums import ExperienceLevel
from timetable_backend.core.exceptions import NotFoundError, ValidationError
from timetable_backend.api.v1.teachers import availability
from timetable_backend.api.v1.teachers import service as teachers_service
from timetable_backend.api.v1.teachers.schemas import TeacherScheduleUpdate
from timetable_backend.api.v1.timetables import service as timetables_service
from timetable_backend.api.v1.timetables.schemas import TimetableSave

AVAILABILITY_URL = "/api/v1/teachers/availability/subject"


@pytest.fixture()
async def math_booked(db_session: AsyncSession, school: SimpleNamespace) -> SimpleNamespace:
    """Teacher A teaches 10A on Monday 08:00-08:45."""
    await timetables_service.save_timetable(
        db_session,
        school.class_a.id,
        TimetableSave(
            academic_year=school.year,
            weekly_timetable={
                "Monday": [
                    {
                        "period_number": 1,
                        "subject_id": str(school.math.id),
                        "teacher_id": str(school.teacher_a.id),
                        "start_time": "08:00",
                        "end_time": "08:45",
                        "room": "Room101",
                    }
                ]
            },
        ),
    )
    return school


def slot_params(school: SimpleNamespace, **overrides) -> dict:
    params = {
        "subject_id": str(school.math.id),
        "day": "Monday",
        "start_time": "08:00",
        "end_time": "08:45",
        "academic_year": school.year,
    }
    params.update(overrides)
    return params


@pytest.mark.parametrize(
    "years,level",
    [
        (None, None),
        (0, ExperienceLevel.BEGINNER),
        (1, ExperienceLevel.BEGINNER),
        (2, ExperienceLevel.INTERMEDIATE),
        (5, ExperienceLevel.INTERMEDIATE),
        (6, ExperienceLevel.EXPERIENCED),
        (10, ExperienceLevel.EXPERIENCED),
        (11, ExperienceLevel.SENIOR),
    ],
)
def test_experience_level(years, level) -> None:
    assert availability.experience_level(years) == level


@pytest.mark.asyncio
async def test_booked_teacher_listed_after_free_one(client: AsyncClient, math_booked: SimpleNamespace) -> None:
    school = math_booked
    response = await client.get(AVAILABILITY_URL, params=slot_params(school, exclude_class_id=str(school.class_b.id)))
    assert response.status_code == 200
    data = response.json()
    assert [t["full_name"] for t in data] == ["Bharat Mehta", "Anita Rao"]

    bharat, anita = data
    assert bharat["is_booked"] is False
    assert bharat["conflicting_assignments"] == []
    assert bharat["max_periods_per_day"] == 6
    assert bharat["experience_level"] == "Intermediate"
    assert bharat["workload_stats"]["total_current_periods"] == 0

    assert anita["is_booked"] is True
    assert anita["max_periods_per_day"] == 8
    assert anita["experience_level"] == "Senior"
    assert [c["conflicting_class"]["name"] for c in anita["conflicting_assignments"]] == ["10A"]
    assert anita["workload_stats"]["total_current_periods"] == 1
    assert anita["workload_stats"]["periods_on_day"] == 1
    assert anita["workload_stats"]["workload_by_day"]["Monday"] == 1


@pytest.mark.asyncio
async def test_excluded_class_does_not_book_teacher(db_session: AsyncSession, math_booked: SimpleNamespace) -> None:
    school = math_booked
    result = await availability.find_available_teachers(
        db_session, school.math.id, "Monday", "08:00", "08:45", exclude_class_id=school.class_a.id
    )
    assert [t.full_name for t in result] == ["Anita Rao", "Bharat Mehta"]
    assert not any(t.is_booked for t in result)
    # Workload still counts the excluded class.
    assert result[0].workload_stats.total_current_periods == 1


@pytest.mark.asyncio
async def test_adjacent_window_is_free(db_session: AsyncSession, math_booked: SimpleNamespace) -> None:
    school = math_booked
    result = await availability.find_available_teachers(db_session, school.math.id, "Monday", "08:45", "09:30")
    assert not any(t.is_booked for t in result)


@pytest.mark.asyncio
async def test_other_academic_year_is_free(db_session: AsyncSession, math_booked: SimpleNamespace) -> None:
    school = math_booked
    result = await availability.find_available_teachers(
        db_session, school.math.id, "Monday", "08:00", "08:45", academic_year="2026"
    )
    assert not any(t.is_booked for t in result)
    assert all(t.workload_stats.total_current_periods == 0 for t in result)


@pytest.mark.asyncio
async def test_subject_without_teachers_is_empty(client: AsyncClient, school: SimpleNamespace) -> None:
    response = await client.get(AVAILABILITY_URL, params=slot_params(school, subject_id=str(school.art.id)))
    assert response.status_code == 200
    assert response.json() == []


@pytest.mark.asyncio
async def test_unknown_subject(db_session: AsyncSession, school: SimpleNamespace) -> None:
    with pytest.raises(NotFoundError):
        await availability.find_available_teachers(db_session, uuid4(), "Monday", "08:00", "08:45")


@pytest.mark.asyncio
async def test_bad_time_window(client: AsyncClient, db_session: AsyncSession, school: SimpleNamespace) -> None:
    with pytest.raises(ValidationError):
        await availability.find_available_teachers(db_session, school.math.id, "Monday", "8:00", "08:45")
    response = await client.get(AVAILABILITY_URL, params=slot_params(school, end_time="9am"))
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_teacher_workload(client: AsyncClient, math_booked: SimpleNamespace) -> None:
    school = math_booked
    response = await client.get(f"/api/v1/teachers/{school.teacher_a.id}/workload")
    assert response.status_code == 200
    data = response.json()
    assert data["total_current_periods"] == 1
    assert data["max_periods_per_day"] == 8
    assert data["utilization_percentage"] == 2
    assert data["classes_taught"] == [str(school.class_a.id)]
    assert data["subjects_taught"] == [str(school.math.id)]
    assert data["workload_by_day"] == {
        "Monday": 1,
        "Tuesday": 0,
        "Wednesday": 0,
        "Thursday": 0,
        "Friday": 0,
        "Saturday": 0,
    }


@pytest.mark.asyncio
async def test_idle_teacher_workload(db_session: AsyncSession, math_booked: SimpleNamespace) -> None:
    school = math_booked
    workload = await availability.get_teacher_workload(db_session, school.teacher_b.id)
    assert workload.total_current_periods == 0
    assert workload.max_periods_per_day == 6
    assert workload.utilization_percentage == 0


@pytest.mark.asyncio
async def test_workload_unknown_teacher(client: AsyncClient, school: SimpleNamespace) -> None:
    response = await client.get(f"/api/v1/teachers/{uuid4()}/workload")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_update_schedule(client: AsyncClient, school: SimpleNamespace) -> None:
    payload = {
        "availability": {"Saturday": {"available": False}, "Monday": {"available": True, "max_periods": 4}},
        "max_periods_per_day": 7,
    }
    response = await client.put(f"/api/v1/teachers/{school.teacher_a.id}/schedule", json=payload)
    assert response.status_code == 200
    data = response.json()
    assert data["max_periods_per_day"] == 7
    assert data["availability"]["Saturday"] == {"available": False, "max_periods": None}
    assert data["availability"]["Monday"] == {"available": True, "max_periods": 4}

    # Leaving availability out keeps what is stored.
    capped = await client.put(f"/api/v1/teachers/{school.teacher_a.id}/schedule", json={"max_periods_per_day": 5})
    assert capped.json()["availability"]["Saturday"]["available"] is False
    assert capped.json()["max_periods_per_day"] == 5


@pytest.mark.asyncio
async def test_update_schedule_rejects_bad_input(client: AsyncClient, school: SimpleNamespace) -> None:
    missing = await client.put(f"/api/v1/teachers/{uuid4()}/schedule", json={"max_periods_per_day": 5})
    assert missing.status_code == 404
    bad_day = await client.put(
        f"/api/v1/teachers/{school.teacher_a.id}/schedule", json={"availability": {"Sunday": {"available": False}}}
    )
    assert bad_day.status_code == 422


@pytest.mark.asyncio
async def test_off_day_teacher_is_listed_with_reason(client: AsyncClient, school: SimpleNamespace) -> None:
    await client.put(
        f"/api/v1/teachers/{school.teacher_a.id}/schedule",
        json={"availability": {"Saturday": {"available": False}}},
    )
    response = await client.get(AVAILABILITY_URL, params=slot_params(school, day="Saturday"))
    data = response.json()
    assert [t["full_name"] for t in data] == ["Bharat Mehta", "Anita Rao"]
    anita = data[1]
    assert anita["day_available"] is False
    assert anita["unavailable_reason"] == "Teacher not available on this day"
    assert anita["is_booked"] is False
    assert data[0]["day_available"] is True
    assert data[0]["unavailable_reason"] is None

    weekday = (await client.get(AVAILABILITY_URL, params=slot_params(school, day="Friday"))).json()
    assert [t["full_name"] for t in weekday] == ["Anita Rao", "Bharat Mehta"]
    assert all(t["day_available"] for t in weekday)


@pytest.mark.asyncio
async def test_daily_cap_prefers_weekday_override(db_session: AsyncSession, school: SimpleNamespace) -> None:
    await teachers_service.update_teacher_schedule(
        db_session,
        school.teacher_b.id,
        TeacherScheduleUpdate(availability={"Monday": {"available": True, "max_periods": 3}}),
    )
    result = await availability.find_available_teachers(db_session, school.math.id, "Monday", "08:00", "08:45")
    bharat = next(t for t in result if t.full_name == "Bharat Mehta")
    anita = next(t for t in result if t.full_name == "Anita Rao")
    assert (bharat.max_periods_per_day, bharat.day_max_periods) == (6, 3)
    assert (anita.max_periods_per_day, anita.day_max_periods) == (8, 8)

    tuesday = await availability.find_available_teachers(db_session, school.math.id, "Tuesday", "08:00", "08:45")
    assert next(t for t in tuesday if t.full_name == "Bharat Mehta").day_max_periods == 6


@pytest.mark.asyncio
async def test_workload_reports_availability(client: AsyncClient, school: SimpleNamespace) -> None:
    await client.put(
        f"/api/v1/teachers/{school.teacher_c.id}/schedule",
        json={"availability": {"Wednesday": {"available": False}}},
    )
    data = (await client.get(f"/api/v1/teachers/{school.teacher_c.id}/workload")).json()
    assert data["availability"]["Wednesday"]["available"] is False
    assert data["availability"]["Monday"] == {"available": True, "max_periods": None}
