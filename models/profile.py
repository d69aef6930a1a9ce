from sqlalchemy import Column, String

from core.db.base import Base
from ._mixins import TimestampMixin


class Profile(Base, TimestampMixin):
    __tablename__ = "profiles"

    # Subject id issued by the identity provider
    id = Column(String(36), primary_key=True)
    email = Column(String(255), nullable=False, index=True)
    full_name = Column(String(255), nullable=True)
    avatar_url = Column(String(1000), nullable=True)
    region = Column(String(255), nullable=True)
    city = Column(String(255), nullable=True)
    school_name = Column(String(255), nullable=True)
    specialization = Column(String(255), nullable=True)
    job_title = Column(String(255), nullable=True)
