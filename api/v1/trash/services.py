import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, Dict, List, Optional, Set

from sqlalchemy.orm import Session

from core.exceptions import Forbidden, NotFound
from drive.client import DriveAPIError, GoogleDriveClient
from drive.tokens import ProviderTokenService
from models import AuditAction, FileMetadata, Folder, Project
from repositories import AuditLogRepository, FileRepository, FolderRepository, ProjectRepository

logger = logging.getLogger(__name__)

DRIFT_WARNING = "تم تنفيذ العملية، لكن تعذّرت مزامنة التغيير مع Google Drive"
EMPTY_TRASH_MESSAGE = "تم تفريغ سلة المحذوفات"


class EntityKind(str, Enum):
    project = "project"
    folder = "folder"
    file = "file"


class Transition(str, Enum):
    soft_delete = "soft_delete"
    restore = "restore"
    hard_delete = "hard_delete"


# Drive call mirroring each transition
MIRROR_CALLS = {
    Transition.soft_delete: "trash_file",
    Transition.restore: "untrash_file",
    Transition.hard_delete: "delete_file",
}


class TrashTarget(ABC):
    """How one entity kind plugs into the lifecycle: its table, its Drive id, its owner."""

    kind: EntityKind
    not_found: str
    messages: Dict[Transition, str]
    audit_actions: Dict[Transition, AuditAction]

    def __init__(self, db: Session):
        self.projects = ProjectRepository(db)

    @abstractmethod
    def drive_id(self, entity) -> Optional[str]:
        ...

    def owning_project(self, entity) -> Optional[Project]:
        return self.projects.get(entity.project_id)


class ProjectTarget(TrashTarget):
    kind = EntityKind.project
    not_found = "Project not found"
    messages = {
        Transition.soft_delete: "تم نقل المشروع إلى سلة المحذوفات",
        Transition.restore: "تم استعادة المشروع بنجاح",
        Transition.hard_delete: "تم حذف المشروع نهائياً",
    }
    audit_actions = {
        Transition.soft_delete: AuditAction.PROJECT_DELETE,
        Transition.restore: AuditAction.PROJECT_RESTORE,
        Transition.hard_delete: AuditAction.PROJECT_PURGE,
    }

    def __init__(self, db: Session):
        super().__init__(db)
        self.repo = self.projects

    def drive_id(self, project: Project) -> Optional[str]:
        return project.root_drive_id

    def owning_project(self, project: Project) -> Project:
        return project


class FolderTarget(TrashTarget):
    kind = EntityKind.folder
    not_found = "Folder not found"
    messages = {
        Transition.soft_delete: "تم نقل المجلد إلى سلة المحذوفات",
        Transition.restore: "تم استعادة المجلد بنجاح",
        Transition.hard_delete: "تم حذف المجلد نهائياً",
    }
    audit_actions = {
        Transition.soft_delete: AuditAction.FOLDER_DELETE,
        Transition.restore: AuditAction.FOLDER_RESTORE,
        Transition.hard_delete: AuditAction.FOLDER_PURGE,
    }

    def __init__(self, db: Session):
        super().__init__(db)
        self.repo = FolderRepository(db)

    def drive_id(self, folder: Folder) -> Optional[str]:
        return folder.drive_folder_id


class FileTarget(TrashTarget):
    kind = EntityKind.file
    not_found = "File not found"
    messages = {
        Transition.soft_delete: "تم نقل الملف إلى سلة المحذوفات",
        Transition.restore: "تم استعادة الملف بنجاح",
        Transition.hard_delete: "تم حذف الملف نهائياً",
    }
    audit_actions = {
        Transition.soft_delete: AuditAction.FILE_DELETE,
        Transition.restore: AuditAction.FILE_RESTORE,
        Transition.hard_delete: AuditAction.FILE_PURGE,
    }

    def __init__(self, db: Session):
        super().__init__(db)
        self.repo = FileRepository(db)

    def drive_id(self, file: FileMetadata) -> Optional[str]:
        return file.drive_file_id


TARGETS = (ProjectTarget, FolderTarget, FileTarget)


@dataclass
class TransitionResult:
    kind: EntityKind
    entity_id: str
    transition: Transition
    drive_synced: bool
    message: str

    def as_response(self) -> dict:
        body = {"success": True, "message": self.message, "drive_synced": self.drive_synced}
        if not self.drive_synced:
            body["warning"] = DRIFT_WARNING
        return body


@dataclass
class EmptyTrashResult:
    files_purged: int
    folders_purged: int
    drive_failures: int

    def as_response(self) -> dict:
        body = {
            "success": True,
            "message": EMPTY_TRASH_MESSAGE,
            "files_purged": self.files_purged,
            "folders_purged": self.folders_purged,
            "drive_synced": self.drive_failures == 0,
        }
        if self.drive_failures:
            body["warning"] = DRIFT_WARNING
        return body


class TrashService:
    """
    Soft-delete, restore and permanent delete of projects, folders and files.

    The metadata store is the record: each transition is written there whether or not the
    mirrored Drive call succeeds. Drive failures are logged, written to the audit log as
    DRIVE_DRIFT and reported through drive_synced=False, never raised.

    Per entity: active --soft_delete--> deleted --restore--> active,
    deleted --hard_delete--> purged. An entity in the wrong source state is NotFound.
    """

    def __init__(
        self,
        db: Session,
        token_service: ProviderTokenService,
        drive_factory: Callable[[str], GoogleDriveClient],
        clock: Callable[[], datetime] = datetime.utcnow,
    ):
        self.token_service = token_service
        self.drive_factory = drive_factory
        self.clock = clock
        self.audit = AuditLogRepository(db)
        self.projects = ProjectRepository(db)
        self.folders = FolderRepository(db)
        self.files = FileRepository(db)
        self.targets = {cls.kind: cls(db) for cls in TARGETS}
        self._tokens: Dict[str, Optional[str]] = {}

    # Transitions

    def soft_delete(self, kind: EntityKind, entity_id: str, caller_id: str) -> TransitionResult:
        target = self.targets[EntityKind(kind)]
        entity, project = self._load_owned(target, entity_id, caller_id)
        if entity.is_deleted:
            raise NotFound(target.not_found)

        synced = self._mirror(target, entity, project.id, caller_id, Transition.soft_delete)
        target.repo.soft_delete(entity_id, now=self.clock())
        return self._finish(target, entity_id, project.id, caller_id, Transition.soft_delete, synced)

    def restore(self, kind: EntityKind, entity_id: str, caller_id: str) -> TransitionResult:
        target = self.targets[EntityKind(kind)]
        entity, project = self._load_owned(target, entity_id, caller_id)
        if not entity.is_deleted:
            raise NotFound(f"{target.not_found} in trash")

        synced = self._mirror(target, entity, project.id, caller_id, Transition.restore)
        target.repo.restore(entity_id)
        return self._finish(target, entity_id, project.id, caller_id, Transition.restore, synced)

    def hard_delete(self, kind: EntityKind, entity_id: str, caller_id: str) -> TransitionResult:
        target = self.targets[EntityKind(kind)]
        entity, project = self._load_owned(target, entity_id, caller_id)
        if not entity.is_deleted:
            raise NotFound(f"{target.not_found} in trash")
        project_id = project.id

        synced = self._mirror(target, entity, project_id, caller_id, Transition.hard_delete)
        stranded = self._stranded_below(entity, set()) if synced and target.kind == EntityKind.folder else []
        target.repo.hard_delete(entity_id)
        self._record_stranded(stranded, target.drive_id(entity), project_id, caller_id)
        return self._finish(target, entity_id, project_id, caller_id, Transition.hard_delete, synced)

    def empty_trash(self, project_id: str, caller_id: str) -> EmptyTrashResult:
        """Purge every soft-deleted file, then every soft-deleted folder, of one project.

        Drive failures never stop the loop; every row is purged from the store.
        """
        project = self._owned_project(project_id, caller_id)
        file_target = self.targets[EntityKind.file]
        folder_target = self.targets[EntityKind.folder]

        deleted_files = self.files.list_for_project(project.id, is_deleted=True)
        deleted_folders = self.folders.list_for_project(project.id, is_deleted=True)
        failures = 0
        reported = {folder.id for folder in deleted_folders}

        for file in deleted_files:
            if not self._mirror(file_target, file, project.id, caller_id, Transition.hard_delete):
                failures += 1
            self.files.hard_delete(file.id)

        for folder in deleted_folders:
            synced = self._mirror(folder_target, folder, project.id, caller_id, Transition.hard_delete)
            if not synced:
                failures += 1
            stranded = self._stranded_below(folder, reported) if synced else []
            self.folders.hard_delete(folder.id)
            self._record_stranded(stranded, folder.drive_folder_id, project.id, caller_id)

        result = EmptyTrashResult(len(deleted_files), len(deleted_folders), failures)
        logger.info(
            f"Emptied trash of project {project.id}: {result.files_purged} files, "
            f"{result.folders_purged} folders, {failures} Drive failures"
        )
        self.audit.record(
            AuditAction.TRASH_EMPTY,
            user_id=caller_id,
            project_id=project.id,
            payload={"files": result.files_purged, "folders": result.folders_purged, "drive_failures": failures},
        )
        return result

    # Queries

    def list_trash(self, project_id: str, caller_id: str) -> Dict[str, List]:
        """Soft-deleted files and folders of a project, each judged by its own flag only."""
        project = self._owned_project(project_id, caller_id)
        return {
            "files": self.files.list_for_project(project.id, is_deleted=True),
            "folders": self.folders.list_for_project(project.id, is_deleted=True),
        }

    def list_deleted_projects(self, caller_id: str) -> List[Project]:
        return self.projects.list_for_owner(caller_id, is_deleted=True)

    # Helpers

    def _owned_project(self, project_id: str, caller_id: str) -> Project:
        project = self.projects.get(project_id)
        if project is None:
            raise NotFound("Project not found")
        if project.user_id != caller_id:
            raise Forbidden()
        return project

    def _load_owned(self, target: TrashTarget, entity_id: str, caller_id: str):
        entity = target.repo.get(entity_id)
        if entity is None:
            raise NotFound(target.not_found)
        project = target.owning_project(entity)
        if project is None or project.user_id != caller_id:
            raise Forbidden()
        return entity, project

    def _token_for(self, caller_id: str) -> Optional[str]:
        if caller_id not in self._tokens:
            self._tokens[caller_id] = self.token_service.get_valid_token(caller_id)
        return self._tokens[caller_id]

    def _mirror(self, target: TrashTarget, entity, project_id: str, caller_id: str, transition: Transition) -> bool:
        drive_id = target.drive_id(entity)
        if not drive_id:
            return True

        operation = MIRROR_CALLS[transition]
        token = self._token_for(caller_id)
        if token is None:
            logger.warning(f"No Drive credential for user {caller_id}; skipped {operation} of {target.kind.value} {entity.id}")
            self._record_drift(target, entity.id, drive_id, project_id, caller_id, operation, "no drive credential")
            return False

        try:
            getattr(self.drive_factory(token), operation)(drive_id)
        except DriveAPIError as e:
            logger.warning(f"Drive {operation} failed for {target.kind.value} {entity.id} ({drive_id}): {e}")
            self._record_drift(target, entity.id, drive_id, project_id, caller_id, operation, str(e))
            return False

        logger.info(f"Drive {operation} done for {target.kind.value} {entity.id} ({drive_id})")
        return True

    def _record_drift(self, target, entity_id, drive_id, project_id, caller_id, operation, error) -> None:
        self.audit.record(
            AuditAction.DRIVE_DRIFT,
            user_id=caller_id,
            project_id=project_id,
            payload={
                "kind": target.kind.value,
                "entity_id": entity_id,
                "drive_id": drive_id,
                "operation": operation,
                "error": error,
            },
        )

    def _stranded_below(self, folder: Folder, reported: Set[str]) -> List[tuple]:
        """Rows left in the store whose Drive objects were deleted along with folder.

        Folder rows already in reported are skipped; every row returned is added to it.
        """
        if not folder.drive_folder_id:
            return []
        below = self.folders.descendants_of(folder.id)
        rows = [(self.targets[EntityKind.folder], f) for f in below]
        rows += [(self.targets[EntityKind.file], f) for f in self.files.in_folders([folder.id] + [f.id for f in below])]
        stranded = []
        for target, row in rows:
            drive_id = target.drive_id(row)
            if row.id in reported or not drive_id:
                continue
            reported.add(row.id)
            stranded.append((target, row.id, drive_id))
        return stranded

    def _record_stranded(self, stranded: List[tuple], parent_drive_id, project_id, caller_id) -> None:
        for target, entity_id, drive_id in stranded:
            logger.warning(f"{target.kind.value} {entity_id} kept in the store but its Drive object went with folder {parent_drive_id}")
            self._record_drift(
                target, entity_id, drive_id, project_id, caller_id, MIRROR_CALLS[Transition.hard_delete],
                f"removed with parent folder {parent_drive_id}",
            )

    def _finish(self, target, entity_id, project_id, caller_id, transition, synced) -> TransitionResult:
        self.audit.record(
            target.audit_actions[transition],
            user_id=caller_id,
            project_id=project_id,
            payload={"entity_id": entity_id, "drive_synced": synced},
        )
        return TransitionResult(target.kind, entity_id, transition, synced, target.messages[transition])
