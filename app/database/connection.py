import logging
from typing import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from app.core.config import settings

logger = logging.getLogger(__name__)


def configure_sqlite(engine: Engine) -> Engine:
    """
    Make pysqlite behave like a transactional store:
    - foreign keys enforced
    - SAVEPOINT usable (driver autocommit off, BEGIN emitted by SQLAlchemy)
    - BEGIN IMMEDIATE, so concurrent writers serialise instead of racing
      on stale reads; SQLite has no row-level locks.

    Every transaction begins IMMEDIATE, read-only ones included, so reads
    such as /health or order listings also queue behind the single write
    lock. That suits SQLite as a development and test store; deployments
    with real read concurrency should point DATABASE_URL at PostgreSQL,
    where these hooks are not installed.
    """

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    return engine


def create_database_engine(url: str, echo: bool = False) -> Engine:
    if url.startswith("sqlite"):
        engine = create_engine(
            url,
            echo=echo,
            connect_args={"check_same_thread": False, "timeout": 30},
        )
        return configure_sqlite(engine)

    logger.info("Creating database engine with pooled connections")
    return create_engine(url, echo=echo, pool_pre_ping=True)


engine = create_database_engine(settings.DATABASE_URL, echo=settings.DB_ECHO)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db() -> Generator[Session, None, None]:
    """Request-scoped session; anything left uncommitted is rolled back."""
    db = SessionLocal()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
