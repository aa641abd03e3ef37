import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from types import SimpleNamespace
from typing import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from timetable_backend.main import app
from timetable_backend.db.session import Base, engine_options, get_db
from timetable_backend.api.v1.classes import service as classes_service
from timetable_backend.api.v1.classes.schemas import ClassCreate
from timetable_backend.api.v1.subjects import service as subjects_service
from timetable_backend.api.v1.subjects.schemas import SubjectCreate
from timetable_backend.api.v1.teachers import service as teachers_service
from timetable_backend.api.v1.teachers.schemas import TeacherCreate
from timetable_backend.api.v1.timetable_outlines import service as outlines_service
from timetable_backend.api.v1.timetable_outlines.schemas import OutlinePeriodIn, TimetableOutlineCreate


TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
ACADEMIC_YEAR = "2025"


@pytest.fixture()
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Fresh in-memory database per test; also overrides the FastAPI DB dependency."""
    engine = create_async_engine(TEST_DATABASE_URL, poolclass=StaticPool, **engine_options(TEST_DATABASE_URL))
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:

        async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
            yield session

        app.dependency_overrides[get_db] = override_get_db
        yield session

    app.dependency_overrides.clear()
    await engine.dispose()


@pytest.fixture()
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to the FastAPI app."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


def period(name: str, start: str, end: str, type_: str = "period") -> OutlinePeriodIn:
    return OutlinePeriodIn(name=name, start_time=start, end_time=end, type=type_)


@pytest.fixture()
async def school(db_session: AsyncSession) -> SimpleNamespace:
    """
    Two classes (10A, 10B), Math/English/Art, three teachers and a "Standard Day" outline:
    P1 08:00-08:45, Break 08:45-09:00, P2 09:00-09:45.
    Teacher A teaches Math; Teacher B teaches Math and English (cap 6); nobody teaches Art.
    """
    class_a = await classes_service.create_class(db_session, ClassCreate(grade="10", division="A"))
    class_b = await classes_service.create_class(db_session, ClassCreate(grade="10", division="B"))
    math = await subjects_service.create_subject(db_session, SubjectCreate(name="Mathematics", code="MATH"))
    english = await subjects_service.create_subject(db_session, SubjectCreate(name="English", code="ENG"))
    art = await subjects_service.create_subject(db_session, SubjectCreate(name="Art", code="ART"))
    teacher_a = await teachers_service.create_teacher(
        db_session,
        TeacherCreate(full_name="Anita Rao", email="anita@example.com", experience_years=12, subject_ids=[math.id]),
    )
    teacher_b = await teachers_service.create_teacher(
        db_session,
        TeacherCreate(
            full_name="Bharat Mehta",
            email="bharat@example.com",
            experience_years=3,
            max_periods_per_day=6,
            subject_ids=[math.id, english.id],
        ),
    )
    teacher_c = await teachers_service.create_teacher(
        db_session,
        TeacherCreate(full_name="Chitra Iyer", email="chitra@example.com", subject_ids=[english.id]),
    )
    standard_day = await outlines_service.create_outline(
        db_session,
        TimetableOutlineCreate(
            name="Standard Day",
            description="Weekday bell schedule",
            periods=[
                period("P1", "08:00", "08:45"),
                period("Break", "08:45", "09:00", "break"),
                period("P2", "09:00", "09:45"),
            ],
        ),
    )
    return SimpleNamespace(
        class_a=class_a,
        class_b=class_b,
        math=math,
        english=english,
        art=art,
        teacher_a=teacher_a,
        teacher_b=teacher_b,
        teacher_c=teacher_c,
        standard_day=standard_day,
        year=ACADEMIC_YEAR,
    )
