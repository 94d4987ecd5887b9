import pytest
from unittest.mock import MagicMock

from firebase_admin import auth

from taskmarket.core import security
from taskmarket.core.security import decode_access_token, user_from_claims


@pytest.fixture
def no_firebase_app(monkeypatch):
    monkeypatch.setattr("taskmarket.core.security.FirebaseManager", MagicMock())


def test_read_users_me(client, login):
    headers = login("u1", name="Ana")

    response = client.get("/auth/me", headers=headers)

    assert response.status_code == 200
    assert response.json() == {"user_id": "u1", "display_name": "Ana", "email": "u1@example.com", "is_admin": False}


def test_read_users_me_invalid_token(client, monkeypatch):
    monkeypatch.setattr("taskmarket.routers.auth.decode_access_token", lambda token: None)

    response = client.get("/auth/me", headers={"Authorization": "Bearer invalid-token"})

    assert response.status_code == 401
    assert response.headers["WWW-Authenticate"] == "Bearer"


def test_logout(client):
    response = client.post("/auth/logout")

    assert response.status_code == 200


def test_user_from_claims_admin_claim_must_be_true():
    assert user_from_claims({"uid": "a", "admin": True}).is_admin is True
    assert user_from_claims({"uid": "a", "admin": "yes"}).is_admin is False
    assert user_from_claims({"uid": "a"}).is_admin is False


def test_user_from_claims_display_name_fallbacks():
    assert user_from_claims({"uid": "a", "name": "Ana"}).display_name == "Ana"
    assert user_from_claims({"uid": "a", "email": "ana.s@example.com"}).display_name == "ana.s"
    assert user_from_claims({"sub": "a"}).display_name == "Anonymous"
    assert user_from_claims({"sub": "a"}).user_id == "a"


def test_decode_access_token_valid(no_firebase_app, monkeypatch):
    verify = MagicMock(return_value={"uid": "u1"})
    monkeypatch.setattr(security.auth, "verify_id_token", verify)

    assert decode_access_token("good-token") == {"uid": "u1"}
    verify.assert_called_once_with("good-token", check_revoked=True)


@pytest.mark.parametrize("error", [ValueError("malformed"), auth.InvalidIdTokenError("bad signature")])
def test_decode_access_token_rejects(no_firebase_app, monkeypatch, error):
    monkeypatch.setattr(security.auth, "verify_id_token", MagicMock(side_effect=error))

    assert decode_access_token("bad-token") is None
