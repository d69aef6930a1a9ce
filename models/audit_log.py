import enum
from datetime import datetime

from sqlalchemy import JSON, Column, DateTime, Enum, Integer, String

from core.db.base import Base


class AuditAction(str, enum.Enum):
    PROJECT_CREATE = "PROJECT_CREATE"
    PROJECT_UPDATE = "PROJECT_UPDATE"
    PROJECT_DELETE = "PROJECT_DELETE"
    PROJECT_RESTORE = "PROJECT_RESTORE"
    PROJECT_PURGE = "PROJECT_PURGE"
    FOLDER_CREATE = "FOLDER_CREATE"
    FOLDER_DELETE = "FOLDER_DELETE"
    FOLDER_RESTORE = "FOLDER_RESTORE"
    FOLDER_PURGE = "FOLDER_PURGE"
    FILE_UPLOAD = "FILE_UPLOAD"
    FILE_DELETE = "FILE_DELETE"
    FILE_RESTORE = "FILE_RESTORE"
    FILE_PURGE = "FILE_PURGE"
    TRASH_EMPTY = "TRASH_EMPTY"
    SHARE_LINK_CREATE = "SHARE_LINK_CREATE"
    SHARE_LINK_UPDATE = "SHARE_LINK_UPDATE"
    SHARE_LINK_ACCESS = "SHARE_LINK_ACCESS"
    DRIVE_DRIFT = "DRIVE_DRIFT"


class AuditLog(Base):
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    # Plain columns: audit rows outlive purged projects
    user_id = Column(String(36), nullable=True, index=True)
    project_id = Column(String(36), nullable=True, index=True)
    action = Column(Enum(AuditAction), nullable=False)
    payload = Column(JSON, nullable=True)
    ip = Column(String(64), nullable=True)
    user_agent = Column(String(500), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
