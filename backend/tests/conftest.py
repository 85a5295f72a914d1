import os

# Keep the module level engine off the user's data directory
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from knot.database import create_tables, get_db  # noqa: E402
from knot.main import app  # noqa: E402
from knot.models import Api, ApiType, Group, HttpMethod  # noqa: E402


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_tables(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    def _override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_group(db):
    counter = {"order": 0}

    def _make(name: str, **kwargs) -> Group:
        counter["order"] += 1
        kwargs.setdefault("sort_order", counter["order"])
        group = Group(name=name, **kwargs)
        db.add(group)
        db.commit()
        return group

    return _make


@pytest.fixture
def make_api(db):
    def _make(group: Group, name: str, endpoint: str = "/", **kwargs) -> Api:
        kwargs.setdefault("type", ApiType.HTTP)
        if kwargs["type"] == ApiType.HTTP:
            kwargs.setdefault("method", HttpMethod.GET)
        api = Api(group_id=group.id, name=name, endpoint=endpoint, **kwargs)
        db.add(api)
        db.commit()
        return api

    return _make
