"""Process-wide logging setup. Modules log through ``logging.getLogger(__name__)``."""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import List, Optional

LOGS_DIR = Path(__file__).resolve().parents[2] / "logs"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

# Marks handlers installed here, so handlers added by servers or test runners are left alone.
_HANDLER_TAG = "_timetable_backend"

_QUIET_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


def _resolve_level(environment: str, level: Optional[str]) -> int:
    if level:
        named = logging.getLevelName(level.strip().upper())
        if isinstance(named, int):
            return named
    return logging.INFO if environment == "production" else logging.DEBUG


def _tagged(handler: logging.Handler, level: int, formatter: logging.Formatter) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(formatter)
    setattr(handler, _HANDLER_TAG, True)
    return handler


def installed_handlers(logger: Optional[logging.Logger] = None) -> List[logging.Handler]:
    logger = logger or logging.getLogger()
    return [h for h in logger.handlers if getattr(h, _HANDLER_TAG, False)]


def setup_logging(*, environment: str, level: Optional[str] = None) -> None:
    """
    Console logging everywhere, plus ``logs/app.log`` (10 MB x 5) in production.
    DEBUG in development, INFO in production; an explicit ``level`` wins.
    Calling it again is a no-op.
    """
    root = logging.getLogger()
    if installed_handlers(root):
        return

    env = (environment or "development").strip().lower()
    resolved = _resolve_level(env, level)
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S%z")

    root.addHandler(_tagged(logging.StreamHandler(), resolved, formatter))
    if env == "production":
        LOGS_DIR.mkdir(parents=True, exist_ok=True)
        rotating = RotatingFileHandler(LOGS_DIR / "app.log", maxBytes=10 * 1024 * 1024, backupCount=5, encoding="utf-8")
        root.addHandler(_tagged(rotating, resolved, formatter))
    root.setLevel(resolved)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(resolved)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
