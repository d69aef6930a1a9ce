from datetime import datetime, timedelta
from unittest.mock import MagicMock

import pytest
from google.auth.exceptions import RefreshError

import drive.tokens as tokens_module
from core.config import settings
from drive.client import DriveAPIError
from drive.crypto import decrypt_tokens, encrypt_tokens
from drive.tokens import ProviderTokenCache, ProviderTokens, ProviderTokenService, refresh_access_token

NOW = datetime(2025, 5, 1, 8, 0, 0)


@pytest.fixture(autouse=True)
def oauth_client(monkeypatch):
    monkeypatch.setattr(settings, "GOOGLE_CLIENT_ID", "client-id")
    monkeypatch.setattr(settings, "GOOGLE_CLIENT_SECRET", "client-secret")


def _store(stored=None):
    store = MagicMock()
    store.get_tokens.return_value = stored
    return store


def _service(store, cache=None, client=None, refresher=None):
    return ProviderTokenService(
        store,
        cache=cache if cache is not None else ProviderTokenCache(),
        clock=lambda: NOW,
        client_factory=MagicMock(return_value=client or MagicMock()),
        refresher=refresher or MagicMock(),
    )


# ----------------------------------------------------------------------------
# Cache
# ----------------------------------------------------------------------------

def test_cache_holds_entries_until_invalidated():
    cache = ProviderTokenCache()
    cache.set("u1", ProviderTokens("a1"))
    cache.set("u2", ProviderTokens("a2"))

    cache.invalidate("u1")
    cache.invalidate("never-cached")

    assert "u1" not in cache
    assert cache.get("u2").access_token == "a2"
    assert len(cache) == 1


def test_load_reads_store_once_then_serves_from_cache():
    store = _store({"access_token": "a1", "refresh_token": "r1", "expires_at": None})
    service = _service(store)

    first = service.load("u1")
    second = service.load("u1")

    assert first == second == ProviderTokens("a1", "r1", None)
    store.get_tokens.assert_called_once_with("u1")


def test_unreadable_stored_tokens_count_as_missing():
    store = MagicMock()
    store.get_tokens.side_effect = ValueError("Stored Drive tokens cannot be decrypted")

    assert _service(store).get_valid_token("u1") is None


# ----------------------------------------------------------------------------
# Validation and refresh
# ----------------------------------------------------------------------------

def test_unexpired_token_is_returned_without_network_calls():
    store = _store({"access_token": "a1", "refresh_token": "r1", "expires_at": NOW + timedelta(minutes=30)})
    service = _service(store)

    assert service.get_valid_token("u1") == "a1"
    service.client_factory.assert_not_called()
    service.refresher.assert_not_called()


def test_successful_refresh_evicts_cache_and_persists_new_token():
    cache = ProviderTokenCache()
    store = _store({"access_token": "old", "refresh_token": "r1", "expires_at": NOW - timedelta(minutes=1)})
    new_expiry = NOW + timedelta(hours=1)
    refresher = MagicMock(return_value=ProviderTokens("new", None, new_expiry))
    service = _service(store, cache=cache, refresher=refresher)

    assert service.get_valid_token("u1") == "new"

    refresher.assert_called_once_with("r1")
    assert "u1" not in cache
    store.store_tokens.assert_called_once_with("u1", "new", "r1", expires_at=new_expiry)
    service.client_factory.assert_not_called()


def test_token_inside_expiry_skew_is_refreshed():
    store = _store({"access_token": "old", "refresh_token": "r1", "expires_at": NOW + timedelta(seconds=30)})
    service = _service(store, refresher=MagicMock(return_value=ProviderTokens("new")))

    assert service.get_valid_token("u1") == "new"


def test_token_without_expiry_is_probed_and_refreshed_when_rejected():
    client = MagicMock()
    client.about.side_effect = DriveAPIError("Failed to read drive account: Invalid Credentials", 401)
    store = _store({"access_token": "old", "refresh_token": "r1", "expires_at": None})
    service = _service(store, client=client, refresher=MagicMock(return_value=ProviderTokens("new")))

    assert service.get_valid_token("u1") == "new"
    service.client_factory.assert_called_once_with("old")


def test_token_without_expiry_is_kept_when_drive_is_unreachable():
    client = MagicMock()
    client.about.side_effect = DriveAPIError("Failed to read drive account: timeout")
    service = _service(_store({"access_token": "a1", "refresh_token": "r1", "expires_at": None}), client=client)

    assert service.get_valid_token("u1") == "a1"
    service.refresher.assert_not_called()


def test_expired_token_without_refresh_token_gives_none():
    store = _store({"access_token": "old", "refresh_token": None, "expires_at": NOW - timedelta(hours=1)})

    assert _service(store).get_valid_token("u1") is None


def test_refresh_failure_gives_none_and_keeps_store_untouched():
    store = _store({"access_token": "old", "refresh_token": "r1", "expires_at": NOW - timedelta(hours=1)})
    refresher = MagicMock(side_effect=DriveAPIError("Failed to refresh token: invalid_grant"))

    assert _service(store, refresher=refresher).get_valid_token("u1") is None
    store.store_tokens.assert_not_called()


def test_refresh_needs_oauth_client_credentials(monkeypatch):
    monkeypatch.setattr(settings, "GOOGLE_CLIENT_SECRET", None)
    store = _store({"access_token": "old", "refresh_token": "r1", "expires_at": NOW - timedelta(hours=1)})
    service = _service(store)

    assert service.get_valid_token("u1") is None
    service.refresher.assert_not_called()


def test_save_invalidates_cache_before_storing():
    cache = ProviderTokenCache()
    cache.set("u1", ProviderTokens("stale"))
    store = _store()

    _service(store, cache=cache).save("u1", "fresh", "r2")

    assert "u1" not in cache
    store.store_tokens.assert_called_once_with("u1", "fresh", "r2", expires_at=None)


# ----------------------------------------------------------------------------
# OAuth refresh grant
# ----------------------------------------------------------------------------

def test_refresh_access_token_uses_google_credentials(monkeypatch):
    expiry = datetime(2025, 5, 1, 9, 0, 0)
    credentials = MagicMock(token="new-access", refresh_token=None, expiry=expiry)
    credentials_cls = MagicMock(return_value=credentials)
    monkeypatch.setattr(tokens_module, "Credentials", credentials_cls)

    refreshed = refresh_access_token("r1")

    assert refreshed == ProviderTokens("new-access", "r1", expiry)
    kwargs = credentials_cls.call_args.kwargs
    assert kwargs["refresh_token"] == "r1"
    assert kwargs["client_id"] == "client-id"
    credentials.refresh.assert_called_once()


def test_refresh_access_token_wraps_refresh_errors(monkeypatch):
    credentials = MagicMock()
    credentials.refresh.side_effect = RefreshError("invalid_grant")
    monkeypatch.setattr(tokens_module, "Credentials", MagicMock(return_value=credentials))

    with pytest.raises(DriveAPIError):
        refresh_access_token("r1")


# ----------------------------------------------------------------------------
# Encryption at rest
# ----------------------------------------------------------------------------

def test_tokens_are_encrypted_at_rest():
    blob = encrypt_tokens("access-1", "refresh-1", secret="k1")

    assert "access-1" not in blob
    assert decrypt_tokens(blob, secret="k1") == {"access_token": "access-1", "refresh_token": "refresh-1"}


def test_decrypting_with_another_key_raises_value_error():
    blob = encrypt_tokens("access-1", None, secret="k1")

    with pytest.raises(ValueError):
        decrypt_tokens(blob, secret="k2")
