from datetime import datetime, timedelta
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from shareit.db.session import create_tables, make_engine
from shareit.repositories.memory import MemoryStorage
from shareit.repositories.sql import SqlStorage
from shareit.services import item_service, user_service

NOW = datetime(2030, 1, 15, 12, 0, 0)
DAY = timedelta(days=1)
HOUR = timedelta(hours=1)


@pytest.fixture
def memory_store():
    return MemoryStorage()


@pytest.fixture
def sql_store():
    engine = make_engine("sqlite://", poolclass=StaticPool)
    create_tables(engine)
    db = sessionmaker(bind=engine, autoflush=False)()
    yield SqlStorage(db)
    db.close()
    engine.dispose()


@pytest.fixture
def sql_file_sessions(tmp_path):
    """Session factory over a SQLite file, for tests that need one session per thread."""
    engine = make_engine(f"sqlite:///{tmp_path / 'shareit.db'}")
    create_tables(engine)
    yield sessionmaker(bind=engine, autoflush=False)
    engine.dispose()


@pytest.fixture(params=["memory", "sql"])
def store(request):
    return request.getfixturevalue(f"{request.param}_store")


@pytest.fixture
def world(store):
    """Owner with one available item, a booker and a bystander."""
    owner = user_service.create_user(store, "Owner", "owner@example.com")
    booker = user_service.create_user(store, "Booker", "booker@example.com")
    stranger = user_service.create_user(store, "Stranger", "stranger@example.com")
    item = item_service.create_item(store, owner.id, "Drill", "Cordless drill", True)
    return SimpleNamespace(store=store, owner=owner, booker=booker, stranger=stranger, item=item)


@pytest.fixture
def client(memory_store):
    from shareit.api.deps import get_store
    from shareit.main import app

    app.dependency_overrides[get_store] = lambda: memory_store
    yield TestClient(app)
    app.dependency_overrides.clear()
