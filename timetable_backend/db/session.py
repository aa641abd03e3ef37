from typing import Any, AsyncGenerator, Dict

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from timetable_backend.core.config import settings


def engine_options(database_url: str) -> Dict[str, Any]:
    """
    Keyword arguments for create_async_engine.

    Server databases get pool_pre_ping and a 300 s pool_recycle so idle connections dropped by the
    server are replaced. SQLite runs in-process; it only needs the aiosqlite connection to be usable
    from the event loop's worker thread.
    """
    options: Dict[str, Any] = {"echo": False, "future": True}
    if make_url(database_url).get_backend_name() == "sqlite":
        options["connect_args"] = {"check_same_thread": False}
    else:
        options["pool_pre_ping"] = True
        options["pool_recycle"] = 300
    return options


engine = create_async_engine(settings.database_url, **engine_options(settings.database_url))

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

Base = declarative_base()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: one session per request, closed when the response is sent."""
    async with AsyncSessionLocal() as session:
        yield session
