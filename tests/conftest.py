import os
import sys

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
os.environ.setdefault("CLASSROOM_DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("CLASSROOM_BCRYPT_ROUNDS", "4")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from classroom.db import Base, get_db
from classroom.main import app
from classroom.models import User, UserRole
from classroom.services.auth import hash_password

# Use in-memory SQLite for testing to ensure isolation
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def session():
    """
    Create a fresh database session for each test.
    """
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(session):
    """
    Create a TestClient that uses the override_get_db dependency.
    """
    def override_get_db():
        try:
            yield session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def create_user(session, username: str, password: str, role: UserRole, name: str = "") -> User:
    user = User(
        username=username,
        name=name or username,
        password_hash=hash_password(password),
        role=role,
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


def login_headers(client: TestClient, username: str, password: str) -> dict:
    response = client.post(
        "/api/auth/login",
        json={"username": username, "password": password},
    )
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['token']}"}


@pytest.fixture
def teacher(session) -> User:
    return create_user(session, "teacher", "123456", UserRole.TEACHER, name="教师账号")


@pytest.fixture
def admin(session) -> User:
    return create_user(session, "admin", "admin123", UserRole.ADMIN, name="管理员")


@pytest.fixture
def teacher_headers(client, teacher) -> dict:
    return login_headers(client, "teacher", "123456")


@pytest.fixture
def admin_headers(client, admin) -> dict:
    return login_headers(client, "admin", "admin123")
