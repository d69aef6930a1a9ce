from datetime import datetime, timedelta

import pytest
from jose import jwt

from conftest import OWNER, STRANGER, make_token
from core.config import settings
from drive.client import DriveAPIError
from drive.crypto import decrypt_tokens
from models import DriveConnection


# ----------------------------------------------------------------------------
# Caller identity
# ----------------------------------------------------------------------------

def test_request_without_credentials_is_unauthorized(client):
    response = client.get("/api/projects")

    assert response.status_code == 401


def test_valid_bearer_token_identifies_caller(client, make_project):
    make_project(user_id=OWNER)

    response = client.get("/api/projects", headers={"Authorization": f"Bearer {make_token(OWNER)}"})

    assert response.status_code == 200
    assert [p["user_id"] for p in response.json()] == [OWNER]


def test_token_is_also_accepted_from_x_access_token(client):
    response = client.get("/api/projects", headers={"x-access-token": make_token(OWNER)})

    assert response.status_code == 200


def test_expired_token_is_unauthorized(client):
    token = make_token(OWNER, expires_in=-60)

    response = client.get("/api/projects", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401


def test_token_signed_with_another_secret_is_unauthorized(client):
    token = make_token(OWNER, secret="not-the-secret")

    response = client.get("/api/projects", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401


@pytest.mark.parametrize("secret", [None, "test-secret"])
def test_non_numeric_expiry_is_unauthorized(client, monkeypatch, secret):
    monkeypatch.setattr(settings, "JWT_SECRET", secret)
    token = jwt.encode({"sub": OWNER, "exp": "tomorrow"}, "test-secret", algorithm="HS256")

    response = client.get("/api/projects", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401


def test_user_id_header_must_match_token_subject(client):
    headers = {"Authorization": f"Bearer {make_token(OWNER)}", "x-user-id": STRANGER}

    response = client.get("/api/projects", headers=headers)

    assert response.status_code == 401


def test_bare_user_id_header_works_outside_production(client):
    response = client.get("/api/projects", headers={"x-user-id": OWNER})

    assert response.status_code == 200


def test_bare_user_id_header_is_rejected_in_production(client, monkeypatch):
    monkeypatch.setattr(settings, "APP_ENV", "production")

    response = client.get("/api/projects", headers={"x-user-id": OWNER})

    assert response.status_code == 401


# ----------------------------------------------------------------------------
# Provider tokens
# ----------------------------------------------------------------------------

def test_store_token_for_another_user_is_forbidden(client, auth_headers):
    response = client.post(
        "/api/auth/store-token",
        json={"user_id": STRANGER, "provider_token": "access-1"},
        headers=auth_headers(OWNER),
    )

    assert response.status_code == 403


def test_store_token_encrypts_and_replaces_cached_entry(client, db, auth_headers, token_cache, connect_drive):
    connect_drive(OWNER, access_token="old-access")
    assert client.get("/api/auth/drive-status", headers=auth_headers()).json()["connected"] is True
    assert OWNER in token_cache

    response = client.post(
        "/api/auth/store-token",
        json={"user_id": OWNER, "provider_token": "new-access", "provider_refresh_token": "new-refresh", "expires_in": 3599},
        headers=auth_headers(OWNER),
    )

    assert response.status_code == 200
    assert response.json() == {"success": True}
    assert OWNER not in token_cache
    connection = db.query(DriveConnection).filter_by(user_id=OWNER).one()
    assert "new-access" not in connection.tokens_encrypted
    assert decrypt_tokens(connection.tokens_encrypted)["access_token"] == "new-access"
    assert connection.token_expires_at > datetime.utcnow() + timedelta(minutes=55)


# ----------------------------------------------------------------------------
# Drive status
# ----------------------------------------------------------------------------

def test_drive_status_without_token(client, auth_headers):
    body = client.get("/api/auth/drive-status", headers=auth_headers()).json()

    assert body["connected"] is False
    assert body["reason"] == "no_token"


def test_drive_status_connected_reports_drive_account(client, db, auth_headers, connect_drive):
    connect_drive()

    body = client.get("/api/auth/drive-status", headers=auth_headers()).json()

    assert body == {"connected": True, "email": "teacher@example.com", "name": "Teacher"}
    assert db.query(DriveConnection).filter_by(user_id=OWNER).one().last_synced_at is not None


@pytest.mark.parametrize("status_code, reason", [(401, "token_expired"), (None, "api_error")])
def test_drive_status_reports_failures(client, auth_headers, connect_drive, drive, status_code, reason):
    connect_drive()
    drive.about.side_effect = DriveAPIError("Failed to read drive account", status_code)

    body = client.get("/api/auth/drive-status", headers=auth_headers()).json()

    assert body["connected"] is False
    assert body["reason"] == reason
    assert body["message"]


# ----------------------------------------------------------------------------
# Profile
# ----------------------------------------------------------------------------

def test_profile_is_missing_until_synced(client, auth_headers):
    assert client.get("/api/profile", headers=auth_headers()).status_code == 404


def test_sync_profile_does_not_overwrite_edited_name(client, auth_headers):
    headers = auth_headers()
    created = client.post(
        "/api/auth/sync-profile",
        json={"email": "teacher@example.com", "full_name": "From Google"},
        headers=headers,
    )
    assert created.status_code == 200
    assert created.json()["full_name"] == "From Google"

    client.patch("/api/profile", json={"full_name": "Edited Name", "school_name": "Al Noor"}, headers=headers)
    synced = client.post(
        "/api/auth/sync-profile",
        json={"email": "teacher@example.com", "full_name": "From Google"},
        headers=headers,
    )

    body = synced.json()
    assert body["full_name"] == "Edited Name"
    assert body["school_name"] == "Al Noor"


def test_sync_profile_requires_valid_email(client, auth_headers):
    response = client.post("/api/auth/sync-profile", json={"email": "not-an-email"}, headers=auth_headers())

    assert response.status_code == 422


def test_profile_update_rejects_unknown_fields(client, auth_headers):
    headers = auth_headers()
    client.post("/api/auth/sync-profile", json={"email": "teacher@example.com"}, headers=headers)

    response = client.patch("/api/profile", json={"email": "other@example.com"}, headers=headers)

    assert response.status_code == 422
