import os
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

LOCAL_DATABASE_URL = "sqlite:///./local.db"


def _is_cloud_run() -> bool:
    # Cloud Run sets K_SERVICE and PORT.
    return bool(os.getenv("K_SERVICE") or os.getenv("PORT"))


def build_database_url() -> str:
    """
    DATABASE_URL is any SQLAlchemy URL, e.g. postgresql+psycopg2://...
    Required on Cloud Run; local development falls back to SQLite ./local.db
    """
    url = os.getenv("DATABASE_URL", "").strip()
    if url:
        return url
    if _is_cloud_run():
        raise RuntimeError("Missing required env var in Cloud Run: DATABASE_URL")
    return LOCAL_DATABASE_URL


DATABASE_URL = build_database_url()

connect_args = {}
if DATABASE_URL.startswith("sqlite"):
    connect_args = {"check_same_thread": False}

engine = create_engine(
    DATABASE_URL,
    pool_pre_ping=True,
    connect_args=connect_args,
)

SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
