import logging
import time
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Optional

from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from . import config
from .shared.errors import StoreError

logger = logging.getLogger(__name__)

Base = declarative_base()


def _is_sqlite(url: str) -> bool:
    return url.startswith("sqlite")


def build_engine(database_url: Optional[str] = None) -> Engine:
    """
    Create the SQLAlchemy engine for the given URL.

    SQLite gets foreign keys switched on and every transaction opened with
    BEGIN IMMEDIATE so concurrent writers queue on the database lock.
    Server databases get a bounded pool, READ COMMITTED isolation and the
    optional statement timeout.
    """
    url = database_url or config.DATABASE_URL

    if _is_sqlite(url):
        engine = create_engine(
            url,
            connect_args={"check_same_thread": False, "timeout": config.SQLITE_BUSY_TIMEOUT},
        )

        @event.listens_for(engine, "connect")
        def _sqlite_connect(dbapi_connection, _connection_record):
            # Let SQLAlchemy emit BEGIN itself (see _sqlite_begin)
            dbapi_connection.isolation_level = None
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys = ON")
            cursor.close()

        @event.listens_for(engine, "begin")
        def _sqlite_begin(conn):
            conn.exec_driver_sql("BEGIN IMMEDIATE")

    else:
        connect_args = {}
        if config.DB_STATEMENT_TIMEOUT_MS > 0:
            connect_args["options"] = f"-c statement_timeout={config.DB_STATEMENT_TIMEOUT_MS}"
        try:
            engine = create_engine(
                url,
                pool_pre_ping=True,
                pool_recycle=config.DB_POOL_RECYCLE,
                pool_size=config.DB_POOL_SIZE,
                max_overflow=config.DB_MAX_OVERFLOW,
                pool_timeout=config.DB_POOL_TIMEOUT,
                isolation_level="READ COMMITTED",
                connect_args=connect_args,
                echo=False,
            )
        except Exception as e:
            logger.error(f"❌ Failed to create database engine: {e}")
            raise
        logger.info(
            f"📊 Connection pool: size={config.DB_POOL_SIZE}, "
            f"max_overflow={config.DB_MAX_OVERFLOW}, timeout={config.DB_POOL_TIMEOUT}s"
        )

    if config.DB_LOG_SLOW_QUERIES:

        @event.listens_for(engine, "before_cursor_execute")
        def before_cursor_execute(conn, _cursor, statement, _parameters, context, _executemany):
            conn.info.setdefault("query_start_time", []).append(time.time())

        @event.listens_for(engine, "after_cursor_execute")
        def after_cursor_execute(conn, _cursor, statement, _parameters, context, _executemany):
            total = time.time() - conn.info["query_start_time"].pop(-1)
            if total > config.DB_SLOW_QUERY_THRESHOLD:
                logger.warning(f"🐌 Slow query ({total:.2f}s): {statement[:200]}...")

    logger.info(f"✅ Database engine created ({engine.url.get_backend_name()})")
    return engine


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)


def get_db(request: Request) -> Iterator[Session]:
    """One session per request, taken from the factory the app was built with"""
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def atomic(db: Session) -> Iterator[Session]:
    """
    Run a block as one transaction on the given session.

    Commits when the block finishes, rolls back on any exception. Raw
    SQLAlchemy failures are re-raised as StoreError.
    """
    try:
        yield db
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"❌ Transaction rolled back: {e}")
        raise StoreError("Database operation failed") from e
    except Exception:
        db.rollback()
        raise
