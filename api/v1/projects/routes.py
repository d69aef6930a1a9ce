from typing import Callable, List, Optional

from fastapi import APIRouter, Depends, File, Form, Path, UploadFile, status
from sqlalchemy.orm import Session

from api.v1.auth.utils import get_current_user
from api.v1.dependencies import get_drive_factory, get_token_service
from api.v1.trash.routes import get_trash_service
from api.v1.trash.services import TrashService
from core.db.dependencies import get_db
from drive.client import GoogleDriveClient
from drive.tokens import ProviderTokenService
from . import services
from .schemas import (
    DuplicateCheckRequest,
    DuplicateCheckResponse,
    FolderCreate,
    FolderOut,
    ProjectCreate,
    ProjectCreated,
    ProjectDetailOut,
    ProjectOut,
    ProjectUpdate,
    UploadResult,
)

router = APIRouter(prefix="/projects", tags=["Projects"])


@router.get("", response_model=List[ProjectOut])
def list_projects(user_id: str = Depends(get_current_user), db: Session = Depends(get_db)):
    return services.list_projects(user_id, db)


# Declared before /{project_id} so "deleted" is not taken for an id
@router.get("/deleted", response_model=List[ProjectOut])
def list_deleted_projects(
    user_id: str = Depends(get_current_user),
    trash: TrashService = Depends(get_trash_service),
):
    return trash.list_deleted_projects(user_id)


@router.get("/{project_id}", response_model=ProjectDetailOut)
def get_project(
    project_id: str = Path(...),
    user_id: str = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    detail = services.get_project_detail(project_id, user_id, db)
    return {
        **ProjectOut.model_validate(detail["project"]).model_dump(),
        "folders": detail["folders"],
        "files": detail["files"],
    }


@router.post("", response_model=ProjectCreated, status_code=status.HTTP_201_CREATED)
def create_project(
    data: ProjectCreate,
    user_id: str = Depends(get_current_user),
    db: Session = Depends(get_db),
    token_service: ProviderTokenService = Depends(get_token_service),
    drive_factory: Callable[[str], GoogleDriveClient] = Depends(get_drive_factory),
):
    project, display_name = services.create_project(data, user_id, db, token_service, drive_factory)
    return {
        **ProjectOut.model_validate(project).model_dump(),
        "message": f"تم إنشاء المجلد بنجاح في Google Drive تحت اسم: {display_name}",
        "folder_display_name": display_name,
    }


@router.patch("/{project_id}", response_model=ProjectOut)
def update_project(
    data: ProjectUpdate,
    project_id: str = Path(...),
    user_id: str = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return services.update_project(project_id, data, user_id, db)


@router.post("/{project_id}/folders", response_model=FolderOut, status_code=status.HTTP_201_CREATED)
def create_folder(
    data: FolderCreate,
    project_id: str = Path(...),
    user_id: str = Depends(get_current_user),
    db: Session = Depends(get_db),
    token_service: ProviderTokenService = Depends(get_token_service),
    drive_factory: Callable[[str], GoogleDriveClient] = Depends(get_drive_factory),
):
    return services.create_folder(project_id, data, user_id, db, token_service, drive_factory)


@router.post("/{project_id}/files/check-duplicates", response_model=DuplicateCheckResponse)
def check_duplicates(
    data: DuplicateCheckRequest,
    project_id: str = Path(...),
    user_id: str = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    duplicates = services.check_duplicates(project_id, data.filenames, data.folder_id, user_id, db)
    return {"duplicates": duplicates, "has_duplicates": bool(duplicates)}


@router.post("/{project_id}/files", response_model=UploadResult, status_code=status.HTTP_201_CREATED)
def upload_files(
    project_id: str = Path(...),
    files: List[UploadFile] = File(...),
    folder_id: Optional[str] = Form(None),
    replace_existing: bool = Form(False),
    user_id: str = Depends(get_current_user),
    db: Session = Depends(get_db),
    token_service: ProviderTokenService = Depends(get_token_service),
    drive_factory: Callable[[str], GoogleDriveClient] = Depends(get_drive_factory),
):
    uploaded, skipped = services.upload_files(
        project_id, files, folder_id, replace_existing, user_id, db, token_service, drive_factory
    )
    return {"uploaded": uploaded, "skipped": skipped}
