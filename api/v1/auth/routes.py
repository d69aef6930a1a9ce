from typing import Callable

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from api.v1.dependencies import get_drive_factory, get_token_service
from core.db.dependencies import get_db
from drive.client import GoogleDriveClient
from drive.tokens import ProviderTokenService
from .schemas import DriveStatus, ProfileOut, ProfileUpdate, StoreTokenRequest, SyncProfileRequest
from .services import get_drive_status, get_profile, store_provider_token, sync_profile, update_profile
from .utils import get_current_user

# Initialize routers
router = APIRouter(prefix="/auth", tags=["Auth"])
profile_router = APIRouter(prefix="/profile", tags=["Profile"])


### AUTHENTICATION ROUTES ###

@router.post("/store-token")
def store_token(
    data: StoreTokenRequest,
    user_id: str = Depends(get_current_user),
    token_service: ProviderTokenService = Depends(get_token_service),
):
    store_provider_token(data, user_id, token_service)
    return {"success": True}


@router.post("/sync-profile", response_model=ProfileOut)
def sync_profile_route(
    data: SyncProfileRequest,
    user_id: str = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return sync_profile(data, user_id, db)


@router.get("/drive-status", response_model=DriveStatus, response_model_exclude_none=True)
def drive_status(
    user_id: str = Depends(get_current_user),
    token_service: ProviderTokenService = Depends(get_token_service),
    drive_factory: Callable[[str], GoogleDriveClient] = Depends(get_drive_factory),
):
    return get_drive_status(user_id, token_service, drive_factory)


### PROFILE ROUTES ###

@profile_router.get("", response_model=ProfileOut)
def read_profile(user_id: str = Depends(get_current_user), db: Session = Depends(get_db)):
    return get_profile(user_id, db)


@profile_router.patch("", response_model=ProfileOut)
def patch_profile(
    data: ProfileUpdate,
    user_id: str = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return update_profile(user_id, data, db)
