"""Engine construction shared by the record store and the queue."""

from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.pool import StaticPool

from rfp_intake.store.schema import metadata
from rfp_intake.utils.logging import get_logger

logger = get_logger(__name__)


def create_db_engine(database_url: str, echo: bool = False) -> Engine:
    """Create a SQLAlchemy engine for SQLite or PostgreSQL.

    For file-backed SQLite the parent directory is created and the
    connection is shared across worker threads. In-memory SQLite uses a
    single static connection so every caller sees the same database.
    """
    url = make_url(database_url)

    if url.get_backend_name() == "sqlite":
        connect_args = {"check_same_thread": False, "timeout": 30}
        if url.database in (None, "", ":memory:"):
            return create_engine(
                database_url,
                echo=echo,
                connect_args=connect_args,
                poolclass=StaticPool,
            )
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)
        return create_engine(database_url, echo=echo, connect_args=connect_args)

    return create_engine(database_url, echo=echo, pool_pre_ping=True)


def init_schema(engine: Engine) -> None:
    """Create tables and indexes that do not exist yet."""
    metadata.create_all(engine)
    logger.info("Database schema ready", url=engine.url.render_as_string(hide_password=True))
