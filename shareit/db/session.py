from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from shareit.core.config import settings


class Base(DeclarativeBase):
    pass


def make_engine(url: str, **kwargs):
    # sync endpoints run in a threadpool; sqlite connections must be shareable
    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
    return create_engine(url, pool_pre_ping=True, **kwargs)


engine = make_engine(settings.DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_tables(bind=None) -> None:
    # Import all models so they are registered on Base.metadata
    from shareit.models import booking, comment, item, item_request, user  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
