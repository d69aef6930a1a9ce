from sqlalchemy import Column, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from core.db.base import Base
from ._mixins import SoftDeleteMixin, TimestampMixin, UUIDPrimaryKeyMixin


class Folder(Base, UUIDPrimaryKeyMixin, TimestampMixin, SoftDeleteMixin):
    __tablename__ = "folders"

    project_id = Column(String(36), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    # Purging a parent lifts its children to the project root instead of purging them
    parent_id = Column(String(36), ForeignKey("folders.id", ondelete="SET NULL"), nullable=True, index=True)
    drive_folder_id = Column(String(255), nullable=False)
    folder_name = Column(String(100), nullable=False)
    sort_order = Column(Integer, default=0, nullable=False)

    project = relationship("Project", back_populates="folders")
