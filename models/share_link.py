import enum

from sqlalchemy import Boolean, Column, DateTime, Enum, ForeignKey, String
from sqlalchemy.orm import relationship

from core.db.base import Base
from ._mixins import TimestampMixin, UUIDPrimaryKeyMixin


class AccessType(str, enum.Enum):
    public = "public"
    pin = "pin"
    google_only = "google_only"


class ShareLink(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "share_links"

    project_id = Column(String(36), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, unique=True)
    slug = Column(String(50), nullable=False, unique=True, index=True)
    access_type = Column(Enum(AccessType), default=AccessType.public, nullable=False)
    pin_hash = Column(String(255), nullable=True)  # bcrypt, salted
    is_enabled = Column(Boolean, default=True, nullable=False)
    expires_at = Column(DateTime, nullable=True)

    project = relationship("Project", back_populates="share_link")
