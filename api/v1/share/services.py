import logging
import secrets
import string
from datetime import datetime
from typing import Callable, Optional

import bcrypt
from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from api.v1.projects.services import get_owned_project
from core.config import settings
from core.exceptions import Forbidden, NotFound, Unauthorized
from drive.client import DriveAPIError, GoogleDriveClient
from drive.tokens import ProviderTokenService
from models import AccessType, AuditAction, ShareLink
from repositories import (
    AuditLogRepository,
    FileRepository,
    FolderRepository,
    ProfileRepository,
    ProjectRepository,
    ShareLinkRepository,
)
from .schemas import PIN_PATTERN, ShareLinkCreate, ShareLinkUpdate

logger = logging.getLogger(__name__)

SLUG_LENGTH = 10
SLUG_ALPHABET = string.ascii_letters + string.digits + "_-"
INVALID_LINK_MESSAGE = "رابط المشاركة غير صالح أو منتهي الصلاحية"
WRONG_PIN_MESSAGE = "رمز PIN غير صحيح"
SIGN_IN_REQUIRED_MESSAGE = "يجب تسجيل الدخول لعرض هذا المشروع"
PIN_REQUIRED_MESSAGE = "رمز PIN مطلوب لهذا النوع من الروابط"


### PIN HELPERS ###

def hash_pin(pin: str) -> str:
    return bcrypt.hashpw(pin.encode(), bcrypt.gensalt()).decode()


def verify_pin(pin: Optional[str], pin_hash: Optional[str]) -> bool:
    if not pin or not pin_hash or not PIN_PATTERN.match(pin):
        return False
    return bcrypt.checkpw(pin.encode(), pin_hash.encode())


def generate_slug() -> str:
    return "".join(secrets.choice(SLUG_ALPHABET) for _ in range(SLUG_LENGTH))


def share_url_for(link: ShareLink) -> str:
    return f"{settings.FRONTEND_URL.rstrip('/')}/public/{link.slug}"


def _owned_link(link_id: str, user_id: str, db: Session) -> ShareLink:
    link = ShareLinkRepository(db).get(link_id)
    if link is None:
        raise NotFound("Share link not found")
    project = ProjectRepository(db).get(link.project_id)
    if project is None or project.user_id != user_id:
        raise Forbidden()
    return link


### OWNER OPERATIONS ###

def get_share_link(project_id: str, user_id: str, db: Session) -> Optional[ShareLink]:
    project = get_owned_project(project_id, user_id, db)
    return ShareLinkRepository(db).get_for_project(project.id)


def create_share_link(project_id: str, data: ShareLinkCreate, user_id: str, db: Session) -> ShareLink:
    """Return the project's link, creating it on first call. A project has at most one link."""
    project = get_owned_project(project_id, user_id, db)
    links = ShareLinkRepository(db)

    existing = links.get_for_project(project.id)
    if existing is not None:
        return existing

    if data.access_type == AccessType.pin and not data.pin:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=PIN_REQUIRED_MESSAGE)

    slug = generate_slug()
    while links.get_by_slug(slug) is not None:
        slug = generate_slug()

    link = links.insert(
        project_id=project.id,
        slug=slug,
        access_type=data.access_type,
        pin_hash=hash_pin(data.pin) if data.pin else None,
        is_enabled=True,
        expires_at=data.expires_at,
    )
    AuditLogRepository(db).record(
        AuditAction.SHARE_LINK_CREATE,
        user_id=user_id,
        project_id=project.id,
        payload={"share_link_id": link.id, "access_type": link.access_type.value},
    )
    logger.info(f"Share link {link.id} created for project {project.id}")
    return link


def update_share_link(link_id: str, data: ShareLinkUpdate, user_id: str, db: Session) -> ShareLink:
    link = _owned_link(link_id, user_id, db)
    # expires_at may be cleared with an explicit null; other fields ignore nulls
    updates = {
        key: value
        for key, value in data.model_dump(exclude_unset=True).items()
        if value is not None or key == "expires_at"
    }

    pin = updates.pop("pin", None)
    if pin:
        updates["pin_hash"] = hash_pin(pin)

    access_type = updates.get("access_type", link.access_type)
    if access_type == AccessType.pin and not (updates.get("pin_hash") or link.pin_hash):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=PIN_REQUIRED_MESSAGE)

    link = ShareLinkRepository(db).update(link.id, **updates)
    AuditLogRepository(db).record(
        AuditAction.SHARE_LINK_UPDATE,
        user_id=user_id,
        project_id=link.project_id,
        payload={"share_link_id": link.id, "fields": sorted(data.model_dump(exclude_unset=True))},
    )
    return link


### PUBLIC VIEW ###

def get_public_project(
    slug: str,
    pin: Optional[str],
    viewer_id: Optional[str],
    db: Session,
    token_service: ProviderTokenService,
    drive_factory: Callable[[str], GoogleDriveClient],
    ip: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> dict:
    """
    Read-only view of a shared project: its active folders and files only.

    An unknown, disabled or expired link, or a project in the trash, all look the same
    to the viewer. Drive links are refreshed with the owner's credential when possible.
    """
    link = ShareLinkRepository(db).get_by_slug(slug)
    if link is None or not link.is_enabled:
        raise NotFound(INVALID_LINK_MESSAGE)
    if link.expires_at is not None and link.expires_at <= datetime.utcnow():
        raise NotFound(INVALID_LINK_MESSAGE)

    project = ProjectRepository(db).get(link.project_id)
    if project is None or project.is_deleted:
        raise NotFound(INVALID_LINK_MESSAGE)

    if link.access_type == AccessType.pin and not verify_pin(pin, link.pin_hash):
        raise Forbidden(WRONG_PIN_MESSAGE)
    if link.access_type == AccessType.google_only and viewer_id is None:
        raise Unauthorized(SIGN_IN_REQUIRED_MESSAGE)

    folders = FolderRepository(db).list_for_project(project.id)
    files = [
        {
            "id": f.id,
            "folder_id": f.folder_id,
            "file_name": f.file_name,
            "mime_type": f.mime_type,
            "size_bytes": f.size_bytes,
            "drive_file_id": f.drive_file_id,
            "web_view_link": f.web_view_link,
            "thumbnail_link": None,
        }
        for f in FileRepository(db).list_for_project(project.id)
    ]
    _refresh_drive_links(files, project.user_id, token_service, drive_factory)

    AuditLogRepository(db).record(
        AuditAction.SHARE_LINK_ACCESS,
        user_id=viewer_id,
        project_id=project.id,
        payload={"slug": slug},
        ip=ip,
        user_agent=user_agent,
    )

    return {
        "project": project,
        "teacher": ProfileRepository(db).get(project.user_id),
        "folders": folders,
        "files": files,
    }


def _refresh_drive_links(files: list, owner_id: str, token_service: ProviderTokenService, drive_factory) -> None:
    if not files:
        return
    tokens = token_service.load(owner_id)
    if tokens is None:
        return

    drive = drive_factory(tokens.access_token)
    for file in files:
        try:
            remote = drive.get_file(file["drive_file_id"])
        except DriveAPIError as e:
            logger.warning(f"Could not refresh Drive links for file {file['id']}: {e}")
            continue
        file["web_view_link"] = remote.web_view_link or file["web_view_link"]
        file["thumbnail_link"] = remote.thumbnail_link
