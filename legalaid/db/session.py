from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from legalaid.core.config import settings

connect_args = {}
engine_kwargs = {}
backend = make_url(settings.DATABASE_URL).get_backend_name()
if backend.startswith("postgresql"):
    connect_args["options"] = "-c timezone=utc"
elif backend == "sqlite":
    # In-memory SQLite must share one connection across sessions
    connect_args["check_same_thread"] = False
    engine_kwargs["poolclass"] = StaticPool

engine = create_engine(
    settings.DATABASE_URL, pool_pre_ping=True, connect_args=connect_args, **engine_kwargs
)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """Yield a session and always close it."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
