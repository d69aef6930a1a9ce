import uuid
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, String


def new_id() -> str:
    return str(uuid.uuid4())


class TimestampMixin:
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class SoftDeleteMixin:
    # Only the trash lifecycle writes these two columns.
    is_deleted = Column(Boolean, default=False, nullable=False, index=True)
    deleted_at = Column(DateTime, nullable=True)


class UUIDPrimaryKeyMixin:
    id = Column(String(36), primary_key=True, default=new_id)
