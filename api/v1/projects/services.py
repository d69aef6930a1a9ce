import logging
from datetime import datetime
from typing import Callable, List, Optional, Tuple

from fastapi import HTTPException, UploadFile, status
from sqlalchemy.orm import Session

from core.exceptions import DriveNotConnected, DriveOperationFailed, Forbidden, NotFound
from drive.client import DriveAPIError, DriveFile, GoogleDriveClient
from drive.tokens import ProviderTokenService
from models import AuditAction, FileMetadata, Folder, Project
from repositories import AuditLogRepository, FileRepository, FolderRepository, ProjectRepository
from .saga import CreateSaga
from .schemas import FolderCreate, ProjectCreate, ProjectUpdate

logger = logging.getLogger(__name__)

DUPLICATE_TITLE_MESSAGE = "عذراً، لديك مشروع بنفس هذا الاسم مسبقاً"
PROJECT_FOLDER_FAILED_MESSAGE = "فشل في إنشاء المجلد في Google Drive. يرجى المحاولة مرة أخرى."
FOLDER_FAILED_MESSAGE = "فشل في إنشاء المجلد في Google Drive"

DriveFactory = Callable[[str], GoogleDriveClient]


### LOOKUPS ###

def get_owned_project(project_id: str, user_id: str, db: Session, include_deleted: bool = False) -> Project:
    """Missing -> 404, someone else's -> 403, in the trash -> 404 unless include_deleted."""
    project = ProjectRepository(db).get(project_id)
    if project is None:
        raise NotFound("Project not found")
    if project.user_id != user_id:
        raise Forbidden()
    if project.is_deleted and not include_deleted:
        raise NotFound("Project not found")
    return project


def resolve_parent_folder(project: Project, folder_id: Optional[str], db: Session) -> Optional[Folder]:
    """The active folder of this project with that id, or None for the project root."""
    if not folder_id:
        return None
    folder = FolderRepository(db).get(folder_id)
    if folder is None or folder.project_id != project.id or folder.is_deleted:
        logger.info(f"Folder {folder_id} is not an active folder of project {project.id}; using the project root")
        return None
    return folder


def _drive_for(user_id: str, token_service: ProviderTokenService, drive_factory: DriveFactory) -> GoogleDriveClient:
    access_token = token_service.get_valid_token(user_id)
    if not access_token:
        logger.warning(f"No provider token found for user {user_id}")
        raise DriveNotConnected()
    return drive_factory(access_token)


### PROJECTS ###

def list_projects(user_id: str, db: Session) -> List[Project]:
    return ProjectRepository(db).list_for_owner(user_id)


def get_project_detail(project_id: str, user_id: str, db: Session) -> dict:
    project = get_owned_project(project_id, user_id, db)
    return {
        "project": project,
        "folders": FolderRepository(db).list_for_project(project.id),
        "files": FileRepository(db).list_for_project(project.id),
    }


def create_project(
    data: ProjectCreate,
    user_id: str,
    db: Session,
    token_service: ProviderTokenService,
    drive_factory: DriveFactory,
) -> Tuple[Project, str]:
    """Create the project's Drive folder, then its row; the folder is removed if the row can't be saved."""
    projects = ProjectRepository(db)
    year_suffix = data.academic_year or str(datetime.utcnow().year)
    display_name = f"{data.title} - {year_suffix}"

    if projects.title_taken(user_id, display_name):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=DUPLICATE_TITLE_MESSAGE)

    drive = _drive_for(user_id, token_service, drive_factory)

    def create_remote() -> DriveFile:
        try:
            return drive.create_folder(display_name)
        except DriveAPIError as e:
            logger.error(f"Failed to create Drive folder for project '{display_name}': {e}")
            raise DriveOperationFailed(PROJECT_FOLDER_FAILED_MESSAGE) from e

    def create_local(folder: DriveFile) -> Project:
        return projects.insert(
            user_id=user_id,
            title=display_name,
            description=data.description,
            status=data.status,
            root_drive_id=folder.id,
        )

    saga = CreateSaga(
        f"project '{display_name}'",
        create_remote,
        create_local,
        lambda folder: drive.delete_file(folder.id),
    )
    project = saga.run()

    AuditLogRepository(db).record(
        AuditAction.PROJECT_CREATE,
        user_id=user_id,
        project_id=project.id,
        payload={"title": display_name, "root_drive_id": project.root_drive_id},
    )
    logger.info(f"Project {project.id} created for user {user_id}")
    return project, display_name


def update_project(project_id: str, data: ProjectUpdate, user_id: str, db: Session) -> Project:
    project = get_owned_project(project_id, user_id, db)
    updates = data.model_dump(exclude_unset=True, exclude_none=True)
    if not updates:
        return project

    if "title" in updates:
        updates["title"] = updates["title"].strip()
        if not updates["title"]:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="العنوان مطلوب")
        if updates["title"] != project.title and ProjectRepository(db).title_taken(user_id, updates["title"]):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=DUPLICATE_TITLE_MESSAGE)

    project = ProjectRepository(db).update(project.id, **updates)
    AuditLogRepository(db).record(
        AuditAction.PROJECT_UPDATE,
        user_id=user_id,
        project_id=project.id,
        payload={key: getattr(value, "value", value) for key, value in updates.items()},
    )
    return project


### FOLDERS ###

def create_folder(
    project_id: str,
    data: FolderCreate,
    user_id: str,
    db: Session,
    token_service: ProviderTokenService,
    drive_factory: DriveFactory,
) -> Folder:
    project = get_owned_project(project_id, user_id, db)
    folders = FolderRepository(db)
    parent = resolve_parent_folder(project, data.parent_folder_id, db)
    parent_id = parent.id if parent else None
    parent_drive_id = parent.drive_folder_id if parent else project.root_drive_id

    drive = _drive_for(user_id, token_service, drive_factory)

    def create_remote() -> DriveFile:
        try:
            return drive.create_folder(data.name, parent_drive_id)
        except DriveAPIError as e:
            logger.error(f"Failed to create Drive folder '{data.name}': {e}")
            raise DriveOperationFailed(FOLDER_FAILED_MESSAGE) from e

    def create_local(remote: DriveFile) -> Folder:
        return folders.insert(
            project_id=project.id,
            parent_id=parent_id,
            folder_name=data.name,
            drive_folder_id=remote.id,
            sort_order=folders.next_sort_order(project.id, parent_id),
        )

    folder = CreateSaga(
        f"folder '{data.name}'",
        create_remote,
        create_local,
        lambda remote: drive.delete_file(remote.id),
    ).run()

    AuditLogRepository(db).record(
        AuditAction.FOLDER_CREATE,
        user_id=user_id,
        project_id=project.id,
        payload={"folder_id": folder.id, "name": folder.folder_name},
    )
    return folder


### FILES ###

def check_duplicates(project_id: str, filenames: List[str], folder_id: Optional[str], user_id: str, db: Session) -> List[str]:
    project = get_owned_project(project_id, user_id, db)
    existing = {f.file_name for f in FileRepository(db).list_for_folder(project.id, folder_id or None)}
    return [name for name in filenames if name in existing]


def upload_files(
    project_id: str,
    uploads: List[UploadFile],
    folder_id: Optional[str],
    replace_existing: bool,
    user_id: str,
    db: Session,
    token_service: ProviderTokenService,
    drive_factory: DriveFactory,
) -> Tuple[List[FileMetadata], List[dict]]:
    """
    Upload each file to Drive, then record it. Files are independent: a Drive failure skips
    that file only, and a store failure removes that file's Drive copy before moving on.
    """
    project = get_owned_project(project_id, user_id, db)
    folder = resolve_parent_folder(project, folder_id, db)
    target_folder_id = folder.id if folder else None
    parent_drive_id = folder.drive_folder_id if folder else project.root_drive_id

    drive = _drive_for(user_id, token_service, drive_factory)
    files = FileRepository(db)
    audit = AuditLogRepository(db)
    uploaded: List[FileMetadata] = []
    skipped: List[dict] = []

    for upload in uploads:
        name = upload.filename or "untitled"
        mime_type = upload.content_type or "application/octet-stream"
        data = upload.file.read()

        if replace_existing:
            _replace_existing(files, drive, project.id, target_folder_id, name)

        saga = CreateSaga(
            f"upload of '{name}'",
            lambda: drive.upload_file(name, mime_type, data, parent_drive_id),
            lambda remote: files.insert(
                project_id=project.id,
                folder_id=target_folder_id,
                file_name=name,
                mime_type=mime_type,
                size_bytes=len(data),
                drive_file_id=remote.id,
                web_view_link=remote.web_view_link,
            ),
            lambda remote: drive.delete_file(remote.id),
        )
        try:
            record = saga.run()
        except DriveAPIError as e:
            logger.error(f"Failed to upload '{name}' to Drive: {e}")
            skipped.append({"file_name": name, "reason": "drive_upload_failed"})
            continue
        except HTTPException as e:
            logger.error(f"Failed to save '{name}': {e.detail}")
            skipped.append({"file_name": name, "reason": "store_write_failed"})
            continue

        uploaded.append(record)
        audit.record(
            AuditAction.FILE_UPLOAD,
            user_id=user_id,
            project_id=project.id,
            payload={"file_id": record.id, "name": name, "size_bytes": record.size_bytes},
        )

    logger.info(f"Uploaded {len(uploaded)} of {len(uploads)} files to project {project.id}")
    return uploaded, skipped


def _replace_existing(files: FileRepository, drive: GoogleDriveClient, project_id: str, folder_id: Optional[str], name: str) -> None:
    existing = files.find_active_by_name(project_id, folder_id, name)
    if existing is None:
        return
    try:
        drive.delete_file(existing.drive_file_id)
    except DriveAPIError as e:
        logger.error(f"Failed to delete existing file '{name}' from Drive, keeping it: {e}")
        return
    existing_id = existing.id
    files.hard_delete(existing_id)
    logger.info(f"Replaced existing file '{name}' ({existing_id})")
