# app/database.py
"""
Engine, session factory and declarative base.

The URL comes from Settings (already normalized to the psycopg2 driver).
SQLite URLs get a single shared connection so an in-memory database is
visible from the threadpool that runs sync endpoints.
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from app.config import get_settings


def _engine_options(url: str) -> dict:
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}, "poolclass": StaticPool}
    return {"pool_pre_ping": True}


DATABASE_URL = get_settings().DATABASE_URL

engine = create_engine(DATABASE_URL, echo=False, **_engine_options(DATABASE_URL))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def init_db() -> None:
    """Create tables directly. Migrations are the normal path; this is for local dev."""
    from app import models  # noqa: F401

    Base.metadata.create_all(bind=engine)


def get_db():
    """FastAPI dependency yielding a session that is closed after the request."""
    db: Session = SessionLocal()
    try:
        yield db
    finally:
        db.close()
