from datetime import datetime, timedelta, timezone

from fastapi.testclient import TestClient
from sqlalchemy import func, select, update

from classroom.models import AuthSession, UserRole
from classroom.services.auth import SessionService, hash_password, verify_password


def test_login_returns_token_and_user(client: TestClient, teacher):
    response = client.post(
        "/api/auth/login",
        json={"username": "teacher", "password": "123456"},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["token"]
    assert data["expiresAt"]
    assert data["user"] == {
        "id": teacher.id,
        "username": "teacher",
        "name": "教师账号",
        "role": "teacher",
    }
    assert response.cookies.get("session_token") == data["token"]


def test_login_token_resolves_to_same_user(client: TestClient, session, teacher):
    response = client.post(
        "/api/auth/login",
        json={"username": "teacher", "password": "123456"},
    )
    token = response.json()["token"]

    resolved = SessionService().resolve_session(session, token)
    assert resolved is not None
    assert resolved.user.id == teacher.id
    assert resolved.user.role == UserRole.TEACHER


def test_login_wrong_password_creates_no_session(client: TestClient, session, teacher):
    response = client.post(
        "/api/auth/login",
        json={"username": "teacher", "password": "wrong"},
    )
    assert response.status_code == 401
    assert response.json() == {"error": "INVALID_CREDENTIALS"}
    assert session.scalar(select(func.count()).select_from(AuthSession)) == 0


def test_login_unknown_user(client: TestClient):
    response = client.post(
        "/api/auth/login",
        json={"username": "nobody", "password": "x"},
    )
    assert response.status_code == 401


def test_login_rejects_invalid_body(client: TestClient):
    response = client.post("/api/auth/login", json={"username": ""})
    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "INVALID_REQUEST"
    assert {item["field"] for item in body["details"]} >= {"username", "password"}


def test_me_requires_bearer_token(client: TestClient, teacher_headers):
    client.cookies.clear()
    assert client.get("/api/auth/me").status_code == 401

    response = client.get("/api/auth/me", headers=teacher_headers)
    assert response.status_code == 200
    assert response.json()["user"]["username"] == "teacher"


def test_me_rejects_malformed_authorization(client: TestClient, teacher):
    response = client.get("/api/auth/me", headers={"Authorization": "Token abc"})
    assert response.status_code == 401
    assert response.json() == {"error": "UNAUTHORIZED"}

    response = client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 401


def test_session_cookie_is_accepted(client: TestClient, teacher):
    client.post("/api/auth/login", json={"username": "teacher", "password": "123456"})
    response = client.get("/api/auth/me")
    assert response.status_code == 200


def test_logout_revokes_session(client: TestClient, session, teacher_headers):
    response = client.post("/api/auth/logout", headers=teacher_headers)
    assert response.status_code == 200
    assert response.json() == {"ok": True}
    assert session.scalar(select(func.count()).select_from(AuthSession)) == 0

    client.cookies.clear()
    assert client.get("/api/auth/me", headers=teacher_headers).status_code == 401


def test_logout_without_session_is_ok(client: TestClient):
    response = client.post("/api/auth/logout")
    assert response.status_code == 200


def test_expired_session_is_rejected_and_removed(session, teacher):
    service = SessionService()
    created = service.create_session(session, teacher.id)
    token = created.token
    session.execute(
        update(AuthSession)
        .where(AuthSession.token == token)
        .values(expires_at=datetime.now(timezone.utc) - timedelta(minutes=1))
    )
    session.commit()

    assert service.resolve_session(session, token) is None
    remaining = session.scalar(select(AuthSession).where(AuthSession.token == token))
    assert remaining is None


def test_expired_session_returns_unauthorized(client: TestClient, session, teacher_headers):
    session.execute(
        update(AuthSession).values(expires_at=datetime.now(timezone.utc) - timedelta(days=1))
    )
    session.commit()
    client.cookies.clear()

    response = client.get("/api/statistics/teacher", headers=teacher_headers)
    assert response.status_code == 401
    assert response.json() == {"error": "UNAUTHORIZED"}


def test_session_expires_after_seven_days(session, teacher):
    created = SessionService().create_session(session, teacher.id)
    expires_at = created.expires_at
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    delta = expires_at - datetime.now(timezone.utc)
    assert timedelta(days=6, hours=23) < delta <= timedelta(days=7)


def test_password_hash_roundtrip():
    hashed = hash_password("secret", rounds=4)
    assert hashed != "secret"
    assert verify_password("secret", hashed)
    assert not verify_password("other", hashed)
    assert not verify_password("secret", "not-a-bcrypt-hash")
