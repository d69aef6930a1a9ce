import re
from datetime import datetime, timezone
from typing import Annotated, List, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict

from models.share_link import AccessType
from models.project import ProjectStatus

PIN_PATTERN = re.compile(r"^\d{4,6}$")


def _check_pin(value: str) -> str:
    if not PIN_PATTERN.match(value):
        raise ValueError("PIN must be 4 to 6 digits")
    return value


Pin = Annotated[str, AfterValidator(_check_pin)]


def _naive_utc(value: datetime) -> datetime:
    # Stored timestamps are naive UTC
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


Expiry = Annotated[datetime, AfterValidator(_naive_utc)]


class ShareLinkCreate(BaseModel):
    access_type: AccessType = AccessType.public
    pin: Optional[Pin] = None
    expires_at: Optional[Expiry] = None


class ShareLinkUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    is_enabled: Optional[bool] = None
    access_type: Optional[AccessType] = None
    pin: Optional[Pin] = None
    expires_at: Optional[Expiry] = None


class ShareLinkOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    project_id: str
    slug: str
    access_type: AccessType
    is_enabled: bool
    expires_at: Optional[datetime] = None
    created_at: datetime
    share_url: str = ""


class PublicProject(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    description: Optional[str] = None
    status: ProjectStatus
    created_at: datetime


class PublicTeacher(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    full_name: Optional[str] = None
    school_name: Optional[str] = None
    specialization: Optional[str] = None
    job_title: Optional[str] = None
    region: Optional[str] = None
    city: Optional[str] = None


class PublicFolder(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    parent_id: Optional[str] = None
    folder_name: str
    sort_order: int


class PublicFile(BaseModel):
    id: str
    folder_id: Optional[str] = None
    file_name: str
    mime_type: str
    size_bytes: Optional[int] = None
    web_view_link: Optional[str] = None
    thumbnail_link: Optional[str] = None


class PublicProjectView(BaseModel):
    project: PublicProject
    teacher: Optional[PublicTeacher] = None
    folders: List[PublicFolder]
    files: List[PublicFile]
