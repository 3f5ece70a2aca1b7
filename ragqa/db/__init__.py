"""
Database engine lifecycle.
One pooled engine is created at startup, kept on app.state and handed to
every store function explicitly.
"""
from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine

from .. import config


def normalize_database_url(url: str) -> str:
    # Heroku-style URLs use the scheme SQLAlchemy dropped in 1.4
    if url.startswith("postgres://"):
        return "postgresql://" + url[len("postgres://"):]
    return url


def create_db_engine(database_url: str = None) -> Engine:
    """
    Build the process-wide connection pool.

    Raises:
        RuntimeError: if no database URL is configured
    """
    url = database_url or config.DATABASE_URL
    if not url:
        raise RuntimeError("DATABASE_URL is not set. Put it in env or .env.")

    return create_engine(
        normalize_database_url(url),
        pool_size=config.DB_POOL_SIZE,
        max_overflow=config.DB_MAX_OVERFLOW,
        pool_pre_ping=True,
    )


def get_engine(request: Request) -> Engine:
    """FastAPI dependency returning the engine created at startup."""
    return request.app.state.engine
