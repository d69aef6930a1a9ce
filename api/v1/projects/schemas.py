from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from models.project import ProjectStatus

TITLE_MAX_LENGTH = 100


class ProjectCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str
    academic_year: Optional[str] = Field(None, alias="academicYear", max_length=20)
    description: Optional[str] = None
    status: ProjectStatus = ProjectStatus.active

    @field_validator("title")
    @classmethod
    def title_required(cls, value):
        if not value.strip():
            raise ValueError("العنوان مطلوب")
        if len(value.strip()) > TITLE_MAX_LENGTH:
            raise ValueError("Title must be under 100 characters")
        return value.strip()


class ProjectUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[ProjectStatus] = None

    @field_validator("title")
    @classmethod
    def title_length(cls, value):
        if value is not None and len(value.strip()) > TITLE_MAX_LENGTH:
            raise ValueError("Title must be under 100 characters")
        return value


class ProjectOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    title: str
    description: Optional[str] = None
    status: ProjectStatus
    root_drive_id: Optional[str] = None
    is_deleted: bool
    deleted_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class ProjectCreated(ProjectOut):
    message: str
    folder_display_name: str


class FolderCreate(BaseModel):
    name: str
    parent_folder_id: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_required(cls, value):
        if not value.strip():
            raise ValueError("اسم المجلد مطلوب")
        if len(value) > 100:
            raise ValueError("Folder name must be under 100 characters")
        return value.strip()


class FolderOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    project_id: str
    parent_id: Optional[str] = None
    folder_name: str
    drive_folder_id: str
    sort_order: int
    created_at: datetime


class FileOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    project_id: str
    folder_id: Optional[str] = None
    file_name: str
    mime_type: str
    size_bytes: Optional[int] = None
    drive_file_id: str
    web_view_link: Optional[str] = None
    created_at: datetime


class ProjectDetailOut(ProjectOut):
    folders: List[FolderOut] = []
    files: List[FileOut] = []


class SkippedUpload(BaseModel):
    file_name: str
    reason: str


class UploadResult(BaseModel):
    uploaded: List[FileOut]
    skipped: List[SkippedUpload] = []


class DuplicateCheckRequest(BaseModel):
    filenames: List[str]
    folder_id: Optional[str] = None


class DuplicateCheckResponse(BaseModel):
    duplicates: List[str]
    has_duplicates: bool
