from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from quizrank.core.config import settings

connect_args = {}
if settings.DATABASE_URL.startswith("sqlite"):
    # FastAPI runs sync endpoints in a threadpool
    connect_args["check_same_thread"] = False

engine = create_engine(settings.DATABASE_URL, connect_args=connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """Yield a request-scoped session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    """Create tables directly, for development setups that skip Alembic"""
    # Import models so they register on Base.metadata
    from quizrank import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
