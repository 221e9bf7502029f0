import time
import logging
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from database.base import Base
from core.config import settings

logger = logging.getLogger(__name__)


def build_engine(database_url: str, echo: bool = False, log_queries: bool = False) -> Engine:
    """Create an engine, sharing one connection for in-memory SQLite"""
    kwargs = {"echo": echo}
    if database_url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if ":memory:" in database_url or database_url in ("sqlite://", "sqlite:///"):
            kwargs["poolclass"] = StaticPool

    db_engine = create_engine(database_url, **kwargs)
    if log_queries:
        _install_query_logging(db_engine)
    return db_engine


def _install_query_logging(db_engine: Engine):
    """Log every statement with its parameters and duration"""

    @event.listens_for(db_engine, "before_cursor_execute")
    def _start_timer(conn, cursor, statement, parameters, context, executemany):
        conn.info.setdefault("query_start_time", []).append(time.perf_counter())

    @event.listens_for(db_engine, "after_cursor_execute")
    def _log_query(conn, cursor, statement, parameters, context, executemany):
        duration = time.perf_counter() - conn.info["query_start_time"].pop()
        logger.info(f"[SQL Query] Duration: {duration * 1000:.2f}ms | Query: {statement} | Args: {parameters}")

    @event.listens_for(db_engine, "handle_error")
    def _log_query_error(exception_context):
        starts = exception_context.connection.info.get("query_start_time") if exception_context.connection else None
        duration = time.perf_counter() - starts.pop() if starts else 0.0
        logger.error(
            f"[SQL Error] Duration: {duration * 1000:.2f}ms | Query: {exception_context.statement} | "
            f"Args: {exception_context.parameters} | Error: {exception_context.original_exception}"
        )


engine = build_engine(
    settings.DATABASE_URL,
    echo=settings.DATABASE_ECHO,
    log_queries=settings.LOG_SQL_QUERIES
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Create all tables
def create_tables(bind: Engine = None):
    import models.package  # noqa: F401  registers the packages table
    Base.metadata.create_all(bind=bind or engine)

# Dependency to get database session
def get_db() -> Session:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
