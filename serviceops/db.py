import logging
import os

from alembic.config import Config
from sqlalchemy import Connection, create_engine, event
from sqlalchemy.engine import Engine, make_url

from alembic import command
from serviceops.settings import settings

logger = logging.getLogger(__name__)

PROJECT_ROOT = os.path.dirname(os.path.dirname(__file__))

_engine: Engine | None = None
_connection: Connection | None = None


def describe_url(url: str) -> str:
    """The database URL with its password masked, safe to log."""
    return make_url(url).render_as_string(hide_password=True)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys = ON")
    cursor.close()


def build_engine(url: str) -> Engine:
    """Create an engine for ``url``.

    SQLite connections may be shared across threads and enforce foreign keys;
    other backends get pre-ping and a 30 minute recycle.
    """
    if make_url(url).get_backend_name() == "sqlite":
        engine = create_engine(url, connect_args={"check_same_thread": False})
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    else:
        engine = create_engine(url, pool_pre_ping=True, pool_recycle=1800)
    logger.info("Database engine created: %s", describe_url(url))
    return engine


def get_engine() -> Engine:
    global _engine
    if _engine is None:
        _engine = build_engine(settings.db_url)
    return _engine


def get_connection() -> Connection:
    """Return a global singleton connection, for CLI use only.

    The web app uses per-request connections via DBConnectionMiddleware instead.
    """
    global _connection
    if _connection is None:
        _connection = get_engine().connect()
        logger.debug("Singleton DB connection created")
    return _connection


def close_connection() -> None:
    global _connection
    if _connection is not None:
        _connection.close()
        _connection = None
        logger.debug("Singleton DB connection closed")


def _get_alembic_config() -> Config:
    """Alembic config for the bundled migrations, with the URL from settings."""
    ini_path = os.path.join(PROJECT_ROOT, "alembic.ini")
    if not os.path.exists(ini_path):
        ini_path = os.path.join(os.getcwd(), "alembic.ini")
    cfg = Config(ini_path)
    cfg.set_main_option("script_location", os.path.join(PROJECT_ROOT, "alembic"))
    return cfg


def initialize_db() -> None:
    """Bring the billing schema up to the latest migration."""
    logger.info("Running Alembic migrations against %s", describe_url(settings.db_url))
    command.upgrade(_get_alembic_config(), "head")
    logger.info("Migrations complete")
