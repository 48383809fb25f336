import logging
from typing import Optional

from sqlmodel import SQLModel, create_engine, Session
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.pool import NullPool

from .config import settings


logger = logging.getLogger(__name__)


def build_engine(database_url: str, echo: bool = False) -> Engine:
    if not database_url.startswith("sqlite"):
        return create_engine(database_url, echo=echo, pool_pre_ping=True)

    sqlite_engine = create_engine(
        database_url,
        echo=echo,
        connect_args={"check_same_thread": False, "timeout": 60},
        poolclass=NullPool,  # avoid multiple pooled connections holding write locks
    )
    # Configure SQLite pragmas to reduce locking
    try:
        with sqlite_engine.connect() as conn:
            conn.exec_driver_sql("PRAGMA journal_mode=WAL;")
            conn.exec_driver_sql("PRAGMA busy_timeout=60000;")
    except OperationalError as exc:
        # The database may be momentarily locked (e.g. during reloader startup).
        logger.warning("Could not set SQLite pragmas: %s", exc)
    return sqlite_engine


engine = build_engine(settings.database_url, echo=settings.sql_echo)


def get_session():
    with Session(engine) as session:
        yield session


def init_db(bind: Optional[Engine] = None):
    from .models import user, expense  # noqa: F401  register tables

    target = bind or engine
    SQLModel.metadata.create_all(target)
    logger.info("Database schema ready (%s)", target.url.render_as_string(hide_password=True))


def close_db(bind: Optional[Engine] = None):
    (bind or engine).dispose()
    logger.info("Database connections closed")
