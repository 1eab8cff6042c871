from sqlalchemy import create_engine, event
from sqlalchemy.orm import declarative_base, sessionmaker
from app.core.config import settings
import logging
import time

logger = logging.getLogger(__name__)

logger.info("CONTENT DATABASE_URL = %s", settings.get_masked_database_url())
logger.info("USER DATABASE_URL = %s", settings.get_masked_database_url(settings.USER_DATABASE_URL))


def _build_engine(url: str):
    connect_args = {}
    if url.startswith("sqlite"):
        # TestClient and the scheduler touch the engine from worker threads
        connect_args["check_same_thread"] = False
    return create_engine(
        url,
        pool_pre_ping=True,
        echo=False,
        connect_args=connect_args,
    )


# Two logical databases: catalogs + anonymous sessions, and user-owned records
engine = _build_engine(settings.DATABASE_URL)
user_engine = _build_engine(settings.USER_DATABASE_URL)

# Add slow query logging (DEBUG mode only)
if settings.DEBUG:
    SLOW_QUERY_THRESHOLD_MS = 200.0

    def receive_before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
        """Store query start time before execution."""
        context._query_start_time = time.perf_counter()

    def receive_after_cursor_execute(conn, cursor, statement, parameters, context, executemany):
        """Log slow queries after execution."""
        if hasattr(context, "_query_start_time"):
            elapsed_ms = (time.perf_counter() - context._query_start_time) * 1000
            if elapsed_ms >= SLOW_QUERY_THRESHOLD_MS:
                statement_first_line = statement.split("\n")[0].strip()[:100]
                logger.warning(
                    f"SLOW_QUERY: {elapsed_ms:.2f}ms - {statement_first_line}"
                )

    for _engine in {engine, user_engine}:
        event.listen(_engine, "before_cursor_execute", receive_before_cursor_execute)
        event.listen(_engine, "after_cursor_execute", receive_after_cursor_execute)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
UserSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=user_engine)

Base = declarative_base()
UserBase = declarative_base()


def get_db():
    """Dependency for getting a content database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_user_db():
    """Dependency for getting a user database session."""
    db = UserSessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    """
    Ensure all tables exist in both logical databases.

    WARNING: create_all() will NOT add missing columns to existing tables.
    It only creates tables that don't exist.
    """
    # Import all models to ensure they're registered with the metadata
    from app import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    UserBase.metadata.create_all(bind=user_engine)
