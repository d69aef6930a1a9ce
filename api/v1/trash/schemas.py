from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class TransitionResponse(BaseModel):
    success: bool = True
    message: str
    drive_synced: bool
    warning: Optional[str] = None


class EmptyTrashResponse(TransitionResponse):
    files_purged: int
    folders_purged: int


class DeletedFolderOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    project_id: str
    parent_id: Optional[str] = None
    folder_name: str
    drive_folder_id: str
    deleted_at: Optional[datetime] = None


class DeletedFileOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    project_id: str
    folder_id: Optional[str] = None
    file_name: str
    mime_type: str
    size_bytes: Optional[int] = None
    drive_file_id: str
    deleted_at: Optional[datetime] = None


class TrashContents(BaseModel):
    files: List[DeletedFileOut]
    folders: List[DeletedFolderOut]
