from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from timetable_backend.api.v1.classes.router import router as classes_router
from timetable_backend.api.v1.conflicts.router import router as conflicts_router
from timetable_backend.api.v1.subjects.router import router as subjects_router
from timetable_backend.api.v1.teachers.router import router as teachers_router
from timetable_backend.api.v1.timetable_outlines.router import router as timetable_outlines_router
from timetable_backend.api.v1.timetables.router import router as timetables_router
from timetable_backend.core.config import settings
from timetable_backend.core.logging import setup_logging


def create_app() -> FastAPI:
    setup_logging(environment=settings.environment, level=settings.log_level)

    app = FastAPI(title="Timetable Backend")

    # CORS: allow frontend to call this API
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Routers (outlines before timetables so /timetables/outlines is matched first)
    app.include_router(classes_router)
    app.include_router(subjects_router)
    app.include_router(teachers_router)
    app.include_router(timetable_outlines_router)
    app.include_router(timetables_router)
    app.include_router(conflicts_router)

    return app


app = create_app()
