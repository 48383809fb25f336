import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["JWT_ALGORITHM"] = "HS256"
os.environ["ENABLE_LEGACY_ROUTES"] = "false"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from app.core.jwt import create_access_token
from app.core.security import hash_password
from app.database import get_session, init_db
from app.main import app, create_app
from app.models.user import User


@pytest.fixture()
def engine():
    test_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(test_engine)
    yield test_engine
    SQLModel.metadata.drop_all(test_engine)
    test_engine.dispose()


@pytest.fixture()
def session(engine):
    with Session(engine) as db_session:
        yield db_session


def _client_for(target_app, engine):
    def override_get_session():
        with Session(engine) as db_session:
            yield db_session

    target_app.dependency_overrides[get_session] = override_get_session
    with TestClient(target_app) as test_client:
        yield test_client
    target_app.dependency_overrides.clear()


@pytest.fixture()
def client(engine):
    yield from _client_for(app, engine)


@pytest.fixture()
def public_client(engine):
    yield from _client_for(create_app(enable_legacy_routes=True), engine)


def make_user(session: Session, username: str) -> User:
    user = User(username=username, hashed_password=hash_password("s3cret-pass"))
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


def bearer(user: User) -> dict:
    token = create_access_token({"sub": str(user.id), "username": user.username})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def alice(session):
    return make_user(session, "alice")


@pytest.fixture()
def bob(session):
    return make_user(session, "bob")


@pytest.fixture()
def alice_headers(alice):
    return bearer(alice)


@pytest.fixture()
def bob_headers(bob):
    return bearer(bob)
