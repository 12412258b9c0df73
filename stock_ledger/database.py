from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from stock_ledger.config import get_settings

settings = get_settings()


def build_engine(url: str):
    """
    Create the SQLAlchemy engine for the given URL.

    Returns None when no URL is configured, which puts every service
    into unavailable mode instead of failing at import time.
    """
    if not url:
        return None

    if url.startswith("sqlite"):
        # Single shared connection so in-memory databases survive across sessions
        return create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )

    # Connection pooling for the real database server
    return create_engine(
        url,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_pre_ping=True,
        connect_args=server_connect_args(url),
    )


def server_connect_args(url: str) -> dict:
    if url.startswith("postgresql"):
        # timestamptz values come back in UTC, whatever the server zone
        return {"options": "-c timezone=utc"}
    return {}


engine = build_engine(settings.DATABASE_URL)

# Create session factory
SessionLocal = (
    sessionmaker(autocommit=False, autoflush=False, bind=engine)
    if engine is not None
    else None
)

# Base class for models
Base = declarative_base()


def get_db():
    """
    Dependency to get database session.
    Yields a database session and closes it after use, or None when
    the database is not configured.
    """
    if SessionLocal is None:
        yield None
        return

    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
