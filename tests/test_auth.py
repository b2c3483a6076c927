import datetime

import jwt

from models import db
from models.user import User
from utils.auth_utils import generate_reset_token, verify_password


# --- Login / profile ---

def test_login_success(client, user):
    response = client.post("/api/auth/login", json={"email": "admin@example.com", "password": "secret123"})
    assert response.status_code == 200
    data = response.get_json()["data"]
    assert data["token"]
    assert data["user"] == {"id": user.id, "email": "admin@example.com"}


def test_login_wrong_password(client, user):
    response = client.post("/api/auth/login", json={"email": "admin@example.com", "password": "nope"})
    assert response.status_code == 401
    assert response.get_json()["success"] is False


def test_login_missing_fields(client):
    response = client.post("/api/auth/login", json={"email": "admin@example.com"})
    assert response.status_code == 400
    assert "password" in response.get_json()["errors"]["fields"]


def test_profile_with_token(client, auth_headers):
    response = client.get("/api/auth/profile", headers=auth_headers)
    assert response.status_code == 200
    assert response.get_json()["data"]["email"] == "admin@example.com"


# --- Token failures ---

def test_missing_token_is_401(client):
    response = client.get("/api/employees")
    assert response.status_code == 401
    assert response.get_json() == {"success": False, "message": "Unauthorized"}


def test_garbage_token_is_403(client):
    response = client.get("/api/employees", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 403
    assert response.get_json() == {"success": False, "message": "Forbidden"}


def test_expired_token_is_403(app, client, user):
    token = jwt.encode(
        {
            "user_id": user.id,
            "email": user.email,
            "exp": datetime.datetime.now(datetime.timezone.utc) - datetime.timedelta(minutes=1),
        },
        app.config["SECRET_KEY"],
        algorithm="HS256",
    )
    response = client.get("/api/employees", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 403


def test_reset_token_cannot_be_used_as_session(client, user):
    token = generate_reset_token(user.email)
    response = client.get("/api/auth/profile", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 403


# --- Password reset ---

def test_forgot_password_emails_link(client, user, mailer):
    response = client.post("/api/auth/forgot-password", json={"email": "admin@example.com"})
    assert response.status_code == 200
    assert "emailSent" not in response.get_json()
    assert mailer.sent[0]["to"] == "admin@example.com"
    assert "http://frontend.test/reset-password?token=" in mailer.sent[0]["body"]


def test_forgot_password_does_not_reveal_accounts(client, user, mailer):
    known = client.post("/api/auth/forgot-password", json={"email": "admin@example.com"})
    unknown = client.post("/api/auth/forgot-password", json={"email": "ghost@example.com"})
    mailer.fail = True
    undelivered = client.post("/api/auth/forgot-password", json={"email": "admin@example.com"})

    assert known.status_code == unknown.status_code == undelivered.status_code == 200
    assert known.get_json() == unknown.get_json() == undelivered.get_json()
    assert [m["to"] for m in mailer.sent] == ["admin@example.com"]


def test_reset_password_changes_hash(client, user):
    token = generate_reset_token(user.email)
    response = client.post("/api/auth/reset-password", json={"token": token, "password": "nouveau1"})
    assert response.status_code == 200

    refreshed = db.session.get(User, user.id)
    assert verify_password(refreshed.password, "nouveau1")
    login = client.post("/api/auth/login", json={"email": "admin@example.com", "password": "nouveau1"})
    assert login.status_code == 200


def test_reset_password_invalid_token(client, user):
    response = client.post("/api/auth/reset-password", json={"token": "bad", "password": "nouveau1"})
    assert response.status_code == 400
    assert response.get_json()["errors"] == {"field": "token"}


def test_reset_password_too_short(client, user):
    token = generate_reset_token(user.email)
    response = client.post("/api/auth/reset-password", json={"token": token, "password": "abc"})
    assert response.status_code == 400


def test_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.get_json()["data"] == {"database": "up"}
