"""Database connection and session management.

This module handles the relational store connection using SQLAlchemy. Two
credential levels are configured: the public URL for client-safe reads and
the privileged service URL for admin mutations. When both URLs are equal a
single engine is shared.
"""

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from config import DATA_DIR, DATABASE_URL, SERVICE_DATABASE_URL
from models.base import Base
# Import models to ensure they are registered with Base.metadata
import models  # noqa: F401


def _create_engine(url: str) -> Engine:
    if not url.startswith("sqlite"):
        return create_engine(url, pool_pre_ping=True)

    # Ensure data directory exists for file-backed SQLite
    DATA_DIR.mkdir(parents=True, exist_ok=True)
    kwargs = {"connect_args": {"check_same_thread": False}}
    if url in ("sqlite://", "sqlite:///:memory:"):
        # In-memory databases live in a single connection
        kwargs["poolclass"] = StaticPool
    return create_engine(url, **kwargs)


engine = _create_engine(DATABASE_URL)
service_engine = (
    engine if SERVICE_DATABASE_URL == DATABASE_URL
    else _create_engine(SERVICE_DATABASE_URL)
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
ServiceSessionLocal = sessionmaker(
    autocommit=False, autoflush=False, bind=service_engine
)


def init_db():
    Base.metadata.create_all(bind=service_engine)


# Initialize DB (create tables if not exist)
init_db()


def get_db():
    """Dependency for getting a public-level database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_service_db():
    """Dependency for getting a privileged database session."""
    db = ServiceSessionLocal()
    try:
        yield db
    finally:
        db.close()
