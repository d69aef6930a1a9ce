from typing import Callable, Optional

from fastapi import APIRouter, Depends, Path, Query, Request, status
from sqlalchemy.orm import Session

from api.v1.auth.utils import get_current_user, get_optional_user
from api.v1.dependencies import get_drive_factory, get_token_service
from core.db.dependencies import get_db
from drive.client import GoogleDriveClient
from drive.tokens import ProviderTokenService
from models import ShareLink
from . import services
from .schemas import PublicProjectView, ShareLinkCreate, ShareLinkOut, ShareLinkUpdate

router = APIRouter(tags=["Share"])
public_router = APIRouter(prefix="/public", tags=["Public"])


def _share_link_out(link: ShareLink) -> ShareLinkOut:
    return ShareLinkOut.model_validate(link).model_copy(update={"share_url": services.share_url_for(link)})


@router.get("/projects/{project_id}/share", response_model=Optional[ShareLinkOut])
def get_share_link(
    project_id: str = Path(...),
    user_id: str = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    link = services.get_share_link(project_id, user_id, db)
    return _share_link_out(link) if link else None


@router.post("/projects/{project_id}/share", response_model=ShareLinkOut, status_code=status.HTTP_201_CREATED)
def create_share_link(
    project_id: str = Path(...),
    data: Optional[ShareLinkCreate] = None,
    user_id: str = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return _share_link_out(services.create_share_link(project_id, data or ShareLinkCreate(), user_id, db))


@router.patch("/share-links/{link_id}", response_model=ShareLinkOut)
def update_share_link(
    data: ShareLinkUpdate,
    link_id: str = Path(...),
    user_id: str = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return _share_link_out(services.update_share_link(link_id, data, user_id, db))


@public_router.get("/{slug}", response_model=PublicProjectView)
def view_shared_project(
    request: Request,
    slug: str = Path(...),
    pin: Optional[str] = Query(None),
    viewer_id: Optional[str] = Depends(get_optional_user),
    db: Session = Depends(get_db),
    token_service: ProviderTokenService = Depends(get_token_service),
    drive_factory: Callable[[str], GoogleDriveClient] = Depends(get_drive_factory),
):
    return services.get_public_project(
        slug,
        pin,
        viewer_id,
        db,
        token_service,
        drive_factory,
        ip=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )
