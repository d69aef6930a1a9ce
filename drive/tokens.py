# drive/tokens.py
import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Dict, Optional

from google.auth.exceptions import RefreshError, TransportError
from google.auth.transport import requests as grequests
from google.oauth2.credentials import Credentials

from core.config import settings
from repositories.drive_connections import DriveConnectionRepository
from .client import DriveAPIError, GoogleDriveClient, drive_client_for

logger = logging.getLogger(__name__)

# Tokens this close to their expiry are refreshed rather than used
EXPIRY_SKEW = timedelta(seconds=60)


@dataclass(frozen=True)
class ProviderTokens:
    access_token: str
    refresh_token: Optional[str] = None
    expires_at: Optional[datetime] = None


class ProviderTokenCache:
    """
    Process-wide map of user id to provider tokens, in front of the drive_connections table.

    There is no eviction policy and no TTL: an entry lives until invalidate() is called.
    Callers must invalidate after a successful refresh and after storing new tokens, so
    that the next read repopulates from the durable store.
    """

    def __init__(self):
        self._entries: Dict[str, ProviderTokens] = {}
        self._lock = threading.Lock()

    def get(self, user_id: str) -> Optional[ProviderTokens]:
        with self._lock:
            return self._entries.get(user_id)

    def set(self, user_id: str, tokens: ProviderTokens) -> None:
        with self._lock:
            self._entries[user_id] = tokens

    def invalidate(self, user_id: str) -> None:
        with self._lock:
            self._entries.pop(user_id, None)

    def __contains__(self, user_id: str) -> bool:
        with self._lock:
            return user_id in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


token_cache = ProviderTokenCache()


def refresh_access_token(refresh_token: str) -> ProviderTokens:
    """Exchange a refresh token for a new access token (OAuth refresh-token grant)."""
    credentials = Credentials(
        token=None,
        refresh_token=refresh_token,
        token_uri=settings.GOOGLE_TOKEN_URI,
        client_id=settings.GOOGLE_CLIENT_ID,
        client_secret=settings.GOOGLE_CLIENT_SECRET,
    )
    try:
        credentials.refresh(grequests.Request())
    except (RefreshError, TransportError) as e:
        raise DriveAPIError(f"Failed to refresh token: {e}") from e

    return ProviderTokens(
        access_token=credentials.token,
        refresh_token=credentials.refresh_token or refresh_token,
        expires_at=credentials.expiry,
    )


class ProviderTokenService:
    """Hands out a usable Drive access token for a user, refreshing it when needed."""

    def __init__(
        self,
        store: DriveConnectionRepository,
        cache: ProviderTokenCache = token_cache,
        clock: Callable[[], datetime] = datetime.utcnow,
        client_factory: Callable[[str], GoogleDriveClient] = drive_client_for,
        refresher: Callable[[str], ProviderTokens] = refresh_access_token,
    ):
        self.store = store
        self.cache = cache
        self.clock = clock
        self.client_factory = client_factory
        self.refresher = refresher

    def load(self, user_id: str) -> Optional[ProviderTokens]:
        cached = self.cache.get(user_id)
        if cached is not None:
            return cached

        try:
            stored = self.store.get_tokens(user_id)
        except ValueError as e:
            logger.error(f"Drive tokens for user {user_id} are unreadable: {e}")
            return None
        if not stored or not stored.get("access_token"):
            return None

        tokens = ProviderTokens(
            access_token=stored["access_token"],
            refresh_token=stored.get("refresh_token"),
            expires_at=stored.get("expires_at"),
        )
        self.cache.set(user_id, tokens)
        return tokens

    def save(
        self,
        user_id: str,
        access_token: str,
        refresh_token: Optional[str] = None,
        expires_at: Optional[datetime] = None,
    ) -> None:
        self.cache.invalidate(user_id)
        self.store.store_tokens(user_id, access_token, refresh_token, expires_at=expires_at)

    def get_valid_token(self, user_id: str) -> Optional[str]:
        tokens = self.load(user_id)
        if tokens is None:
            logger.info(f"No Drive token stored for user {user_id}")
            return None

        if tokens.expires_at is not None:
            if tokens.expires_at - EXPIRY_SKEW > self.clock():
                return tokens.access_token
            logger.info(f"Drive token for user {user_id} has expired")
        else:
            try:
                self.client_factory(tokens.access_token).about()
                return tokens.access_token
            except DriveAPIError as e:
                if e.status_code is None:
                    # Drive unreachable: the token may still be fine, let the caller try it
                    logger.warning(f"Could not validate Drive token for user {user_id}: {e}")
                    return tokens.access_token
                logger.info(f"Drive token for user {user_id} rejected with status {e.status_code}")

        return self._refresh(user_id, tokens)

    def _refresh(self, user_id: str, tokens: ProviderTokens) -> Optional[str]:
        if not tokens.refresh_token:
            logger.info(f"No refresh token available for user {user_id}")
            return None
        if not settings.GOOGLE_CLIENT_ID or not settings.GOOGLE_CLIENT_SECRET:
            logger.error("Missing Google OAuth client credentials; cannot refresh Drive token")
            return None

        try:
            refreshed = self.refresher(tokens.refresh_token)
        except DriveAPIError as e:
            logger.error(f"Failed to refresh Drive token for user {user_id}: {e}")
            return None

        self.save(
            user_id,
            refreshed.access_token,
            refreshed.refresh_token or tokens.refresh_token,
            expires_at=refreshed.expires_at,
        )
        logger.info(f"Drive token refreshed for user {user_id}")
        return refreshed.access_token
