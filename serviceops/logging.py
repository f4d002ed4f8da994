import logging
import sys

from serviceops.settings import settings

TEXT_FORMAT = "%(levelname)s %(name)s: %(message)s"
JSON_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

# Library loggers kept at WARNING regardless of the configured level.
# Routes log their own requests, so uvicorn's access lines are noise.
QUIET_LOGGERS = ("uvicorn.access", "alembic.runtime.migration", "fpdf", "fontTools")


def _formatter() -> logging.Formatter:
    if not settings.log_json:
        return logging.Formatter(TEXT_FORMAT)

    from pythonjsonlogger.json import JsonFormatter

    return JsonFormatter(
        fmt=JSON_FORMAT,
        rename_fields={"asctime": "timestamp", "levelname": "level"},
        static_fields={"service": "serviceops"},
    )


def configure_logging(level: str | None = None) -> None:
    """Configure the root logger from settings.

    ``level`` overrides ``settings.log_level``. Call ``reconfigure()`` after
    Alembic migrations, whose ``fileConfig`` replaces the root handlers.
    """
    name = (level or settings.log_level).upper()
    root_level = getattr(logging, name, logging.INFO)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(_formatter())

    root = logging.getLogger()
    root.setLevel(root_level)
    root.handlers.clear()
    root.addHandler(handler)

    for quiet in QUIET_LOGGERS:
        logging.getLogger(quiet).setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO if settings.log_sql else logging.WARNING)


reconfigure = configure_logging
