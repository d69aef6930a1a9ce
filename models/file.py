from sqlalchemy import BigInteger, Column, ForeignKey, String
from sqlalchemy.orm import relationship

from core.db.base import Base
from ._mixins import SoftDeleteMixin, TimestampMixin, UUIDPrimaryKeyMixin


class FileMetadata(Base, UUIDPrimaryKeyMixin, TimestampMixin, SoftDeleteMixin):
    __tablename__ = "files_metadata"

    project_id = Column(String(36), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    # NULL means the file sits at the project root
    folder_id = Column(String(36), ForeignKey("folders.id", ondelete="SET NULL"), nullable=True, index=True)
    drive_file_id = Column(String(255), nullable=False)
    file_name = Column(String(255), nullable=False)
    mime_type = Column(String(255), nullable=False, default="application/octet-stream")
    size_bytes = Column(BigInteger, nullable=True)
    checksum = Column(String(128), nullable=True)
    web_view_link = Column(String(1000), nullable=True)

    project = relationship("Project", back_populates="files")
