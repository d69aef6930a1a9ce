from sqlalchemy import Column, DateTime, String, Text, UniqueConstraint

from core.db.base import Base
from ._mixins import TimestampMixin, UUIDPrimaryKeyMixin


class DriveConnection(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "drive_connections"

    user_id = Column(String(36), nullable=False, index=True)
    provider = Column(String(20), nullable=False, default="google")
    provider_user_id = Column(String(255), nullable=False)

    # Fernet token holding {"access_token": ..., "refresh_token": ...}
    tokens_encrypted = Column(Text, nullable=False)
    token_expires_at = Column(DateTime, nullable=True)
    last_synced_at = Column(DateTime, nullable=True)

    __table_args__ = (
        UniqueConstraint("user_id", "provider", name="uix_drive_connection_user_provider"),
    )
