from typing import Callable

from fastapi import APIRouter, Depends, Path
from sqlalchemy.orm import Session

from api.v1.auth.utils import get_current_user
from api.v1.dependencies import get_drive_factory, get_token_service
from core.db.dependencies import get_db
from drive.client import GoogleDriveClient
from drive.tokens import ProviderTokenService
from .schemas import EmptyTrashResponse, TrashContents, TransitionResponse
from .services import EntityKind, TrashService

router = APIRouter(tags=["Trash"])


def get_trash_service(
    db: Session = Depends(get_db),
    token_service: ProviderTokenService = Depends(get_token_service),
    drive_factory: Callable[[str], GoogleDriveClient] = Depends(get_drive_factory),
) -> TrashService:
    return TrashService(db, token_service, drive_factory)


### PROJECTS ###

@router.delete("/projects/{project_id}", response_model=TransitionResponse, response_model_exclude_none=True)
def delete_project(
    project_id: str = Path(...),
    user_id: str = Depends(get_current_user),
    service: TrashService = Depends(get_trash_service),
):
    return service.soft_delete(EntityKind.project, project_id, user_id).as_response()


@router.post("/projects/{project_id}/restore", response_model=TransitionResponse, response_model_exclude_none=True)
def restore_project(
    project_id: str = Path(...),
    user_id: str = Depends(get_current_user),
    service: TrashService = Depends(get_trash_service),
):
    return service.restore(EntityKind.project, project_id, user_id).as_response()


@router.delete("/projects/{project_id}/permanent", response_model=TransitionResponse, response_model_exclude_none=True)
def purge_project(
    project_id: str = Path(...),
    user_id: str = Depends(get_current_user),
    service: TrashService = Depends(get_trash_service),
):
    return service.hard_delete(EntityKind.project, project_id, user_id).as_response()


@router.get("/projects/{project_id}/trash", response_model=TrashContents)
def get_project_trash(
    project_id: str = Path(...),
    user_id: str = Depends(get_current_user),
    service: TrashService = Depends(get_trash_service),
):
    return service.list_trash(project_id, user_id)


@router.delete("/projects/{project_id}/trash", response_model=EmptyTrashResponse, response_model_exclude_none=True)
def empty_project_trash(
    project_id: str = Path(...),
    user_id: str = Depends(get_current_user),
    service: TrashService = Depends(get_trash_service),
):
    return service.empty_trash(project_id, user_id).as_response()


### FOLDERS ###

@router.delete("/folders/{folder_id}", response_model=TransitionResponse, response_model_exclude_none=True)
def delete_folder(
    folder_id: str = Path(...),
    user_id: str = Depends(get_current_user),
    service: TrashService = Depends(get_trash_service),
):
    return service.soft_delete(EntityKind.folder, folder_id, user_id).as_response()


@router.post("/folders/{folder_id}/restore", response_model=TransitionResponse, response_model_exclude_none=True)
def restore_folder(
    folder_id: str = Path(...),
    user_id: str = Depends(get_current_user),
    service: TrashService = Depends(get_trash_service),
):
    return service.restore(EntityKind.folder, folder_id, user_id).as_response()


@router.delete("/folders/{folder_id}/permanent", response_model=TransitionResponse, response_model_exclude_none=True)
def purge_folder(
    folder_id: str = Path(...),
    user_id: str = Depends(get_current_user),
    service: TrashService = Depends(get_trash_service),
):
    return service.hard_delete(EntityKind.folder, folder_id, user_id).as_response()


### FILES ###

@router.delete("/files/{file_id}", response_model=TransitionResponse, response_model_exclude_none=True)
def delete_file(
    file_id: str = Path(...),
    user_id: str = Depends(get_current_user),
    service: TrashService = Depends(get_trash_service),
):
    return service.soft_delete(EntityKind.file, file_id, user_id).as_response()


@router.post("/files/{file_id}/restore", response_model=TransitionResponse, response_model_exclude_none=True)
def restore_file(
    file_id: str = Path(...),
    user_id: str = Depends(get_current_user),
    service: TrashService = Depends(get_trash_service),
):
    return service.restore(EntityKind.file, file_id, user_id).as_response()


@router.delete("/files/{file_id}/permanent", response_model=TransitionResponse, response_model_exclude_none=True)
def purge_file(
    file_id: str = Path(...),
    user_id: str = Depends(get_current_user),
    service: TrashService = Depends(get_trash_service),
):
    return service.hard_delete(EntityKind.file, file_id, user_id).as_response()
