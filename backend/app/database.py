"""Shared SQLAlchemy Base, default engine and session factory."""
from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from app.config import settings

Base = declarative_base()

engine = create_engine(settings.database_url, pool_pre_ping=True)
SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def get_db(request: Request):
    """Yield a session from the session factory the app was built with."""
    db = request.app.state.context.session_factory()
    try:
        yield db
    finally:
        db.close()
