from contextlib import contextmanager
import logging

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker, declarative_base
from blog.core.config import get_database_url, settings
from blog.core.errors import StorageError

logger = logging.getLogger(__name__)


def engine_options(db_url: str) -> dict:
    """Pool sizing and per-dialect deadlines for every store call"""
    if db_url.startswith("sqlite"):
        # sqlite: busy timeout in seconds
        return {
            "connect_args": {
                "check_same_thread": False,
                "timeout": settings.DB_CONNECT_TIMEOUT,
            },
        }

    connect_args = {}
    if db_url.startswith("postgresql"):
        connect_args = {
            "connect_timeout": settings.DB_CONNECT_TIMEOUT,
            "options": f"-c statement_timeout={settings.DB_STATEMENT_TIMEOUT_MS}",
        }
    return {
        "pool_pre_ping": True,
        "pool_size": settings.DB_POOL_SIZE,
        "max_overflow": settings.DB_MAX_OVERFLOW,
        "pool_timeout": settings.DB_POOL_TIMEOUT,
        "connect_args": connect_args,
    }


DATABASE_URL = get_database_url()

engine = create_engine(DATABASE_URL, echo=False, **engine_options(DATABASE_URL))
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()

def get_db():
    """One pooled session per request, always released"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def storage_guard(db: Session, action: str):
    """Roll back and surface driver failures as StorageError, no retry"""
    try:
        yield
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"{action} failed: {e}")
        raise StorageError(f"{action} failed") from e
