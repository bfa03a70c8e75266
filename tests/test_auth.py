"""Tests for authentication: password hashing, session tokens, login/logout."""

from datetime import datetime, timedelta, timezone

from armaso_pos.core import security
from armaso_pos.core.config import settings
from armaso_pos.core.security import (
    create_session_token,
    decode_session_token,
    get_password_hash,
    revoke_session_token,
    verify_password,
)
from armaso_pos.models.user import User


# ============== Password hashing ==============

class TestPasswordHashing:
    def test_hash_and_verify(self):
        h = get_password_hash("secret123")
        assert verify_password("secret123", h)

    def test_wrong_password_rejected(self):
        h = get_password_hash("secret123")
        assert not verify_password("wrong", h)

    def test_hash_is_unique(self):
        assert get_password_hash("same") != get_password_hash("same")

    def test_invalid_hash_returns_false(self):
        assert not verify_password("test", "not-a-hash")


# ============== Session tokens ==============

class TestSessionTokens:
    def test_create_and_decode(self):
        token = create_session_token(42, "kasir")
        payload = decode_session_token(token)
        assert payload["sub"] == "42"
        assert payload["username"] == "kasir"
        assert "exp" in payload
        assert "jti" in payload

    def test_expired_token_rejected(self):
        token = create_session_token(1, "kasir", expires_delta=timedelta(seconds=-10))
        assert decode_session_token(token) is None

    def test_tampered_token_rejected(self):
        token = create_session_token(1, "kasir")
        assert decode_session_token(token[:-5] + "XXXXX") is None

    def test_garbage_rejected(self):
        assert decode_session_token("not.a.token") is None

    def test_revoked_token_rejected(self):
        token = create_session_token(1, "kasir")
        assert revoke_session_token(token)
        assert decode_session_token(token) is None

    def test_revoking_drops_expired_revocations(self, monkeypatch):
        now = datetime.now(timezone.utc)
        revoked = {"lama": now - timedelta(minutes=1), "masih": now + timedelta(hours=1)}
        monkeypatch.setattr(security, "_revoked_tokens", revoked)

        token = create_session_token(1, "kasir")
        assert revoke_session_token(token)

        assert "lama" not in revoked
        assert "masih" in revoked
        assert len(revoked) == 2
        assert decode_session_token(token) is None


# ============== Login endpoint ==============

class TestLogin:
    def test_successful_login_sets_cookie(self, client, test_user):
        res = client.post("/api/v1/auth/login", json={
            "username": "kasir",
            "password": "testpass123",
        })
        assert res.status_code == 200
        assert res.json() == {"success": True, "username": "kasir", "error": None}
        assert settings.session_cookie_name in res.cookies

        session = client.get("/api/v1/auth/session").json()
        assert session["is_logged_in"] is True
        assert session["username"] == "kasir"
        assert session["user_id"] == test_user.id

    def test_wrong_password(self, client, test_user):
        res = client.post("/api/v1/auth/login", json={
            "username": "kasir",
            "password": "nope",
        })
        assert res.status_code == 401
        data = res.json()
        assert data["success"] is False
        assert data["error"] == "Invalid username or password"

    def test_unknown_user_gets_same_error(self, client, test_user):
        res = client.post("/api/v1/auth/login", json={
            "username": "ghost",
            "password": "testpass123",
        })
        assert res.status_code == 401
        assert res.json()["error"] == "Invalid username or password"

    def test_inactive_user_cannot_login(self, client, db_session, test_user):
        test_user.is_active = False
        db_session.commit()
        res = client.post("/api/v1/auth/login", json={
            "username": "kasir",
            "password": "testpass123",
        })
        assert res.status_code == 401

    def test_missing_fields(self, client):
        res = client.post("/api/v1/auth/login", json={"username": "kasir"})
        assert res.status_code == 422


# ============== Session and logout ==============

class TestSession:
    def test_anonymous_session(self, client):
        res = client.get("/api/v1/auth/session")
        assert res.status_code == 200
        assert res.json()["is_logged_in"] is False

    def test_protected_route_requires_session(self, client):
        res = client.get("/api/v1/menu/items")
        assert res.status_code == 401

    def test_forged_cookie_rejected(self, client):
        client.cookies.set(settings.session_cookie_name, "eyJhbGciOiJub25lIn0.e30.")
        assert client.get("/api/v1/menu/items").status_code == 401

    def test_logout_revokes_token(self, auth_client, session_token):
        assert auth_client.get("/api/v1/menu/items").status_code == 200

        res = auth_client.post("/api/v1/auth/logout")
        assert res.status_code == 200
        assert res.json() == {"success": True}

        # replaying the old cookie no longer works
        auth_client.cookies.set(settings.session_cookie_name, session_token)
        assert auth_client.get("/api/v1/menu/items").status_code == 401

    def test_logout_without_session(self, client):
        res = client.post("/api/v1/auth/logout")
        assert res.status_code == 200

    def test_disabled_user_session_rejected(self, auth_client, db_session, test_user):
        test_user.is_active = False
        db_session.commit()
        res = auth_client.get("/api/v1/menu/items")
        assert res.status_code == 401
        assert res.json()["detail"] == "User account is disabled"

    def test_deleted_user_session_rejected(self, client, db_session):
        user = User(username="temp", password_hash=get_password_hash("x"))
        db_session.add(user)
        db_session.commit()
        token = create_session_token(user.id, user.username)
        db_session.delete(user)
        db_session.commit()

        client.cookies.set(settings.session_cookie_name, token)
        assert client.get("/api/v1/menu/items").status_code == 401
