import enum

from sqlalchemy import Column, Enum, String, Text
from sqlalchemy.orm import relationship

from core.db.base import Base
from ._mixins import SoftDeleteMixin, TimestampMixin, UUIDPrimaryKeyMixin


class ProjectStatus(str, enum.Enum):
    active = "active"
    archived = "archived"
    draft = "draft"


class Project(Base, UUIDPrimaryKeyMixin, TimestampMixin, SoftDeleteMixin):
    __tablename__ = "projects"

    user_id = Column(String(36), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(Enum(ProjectStatus), default=ProjectStatus.active, nullable=False)

    # Drive folder created together with the project; never reassigned
    root_drive_id = Column(String(255), nullable=True)

    folders = relationship("Folder", back_populates="project", cascade="all, delete-orphan", passive_deletes=True)
    files = relationship("FileMetadata", back_populates="project", cascade="all, delete-orphan", passive_deletes=True)
    share_link = relationship(
        "ShareLink", back_populates="project", uselist=False, cascade="all, delete-orphan", passive_deletes=True
    )
