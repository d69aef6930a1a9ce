from datetime import datetime
from typing import Optional

from drive.crypto import decrypt_tokens, encrypt_tokens
from models.drive_connection import DriveConnection
from .base import Repository


class DriveConnectionRepository(Repository[DriveConnection]):
    """Durable home of provider credentials; the token cache reads through this."""

    model = DriveConnection

    def get_for_user(self, user_id: str, provider: str = "google") -> Optional[DriveConnection]:
        return self.first(user_id=user_id, provider=provider)

    def store_tokens(
        self,
        user_id: str,
        access_token: str,
        refresh_token: Optional[str] = None,
        expires_at: Optional[datetime] = None,
        provider: str = "google",
    ) -> DriveConnection:
        values = {
            "tokens_encrypted": encrypt_tokens(access_token, refresh_token),
            "token_expires_at": expires_at,
        }
        connection = self.get_for_user(user_id, provider)
        if connection is None:
            return self.insert(user_id=user_id, provider=provider, provider_user_id=user_id, **values)
        return self.update(connection.id, **values)

    def get_tokens(self, user_id: str, provider: str = "google") -> Optional[dict]:
        connection = self.get_for_user(user_id, provider)
        if connection is None:
            return None
        tokens = decrypt_tokens(connection.tokens_encrypted)
        tokens["expires_at"] = connection.token_expires_at
        return tokens

    def mark_synced(self, user_id: str, now: datetime, provider: str = "google") -> None:
        connection = self.get_for_user(user_id, provider)
        if connection is not None:
            self.update(connection.id, last_synced_at=now)
