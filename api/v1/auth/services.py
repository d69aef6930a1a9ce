import logging
from datetime import datetime, timedelta
from typing import Callable

from sqlalchemy.orm import Session

from core.exceptions import Forbidden, NotFound
from drive.client import DriveAPIError, GoogleDriveClient
from drive.tokens import ProviderTokenService
from models.profile import Profile
from repositories import ProfileRepository
from .schemas import ProfileUpdate, StoreTokenRequest, SyncProfileRequest

logger = logging.getLogger(__name__)

NO_TOKEN_MESSAGE = "لم يتم ربط حسابك بجوجل درايف. الرجاء إعادة تسجيل الدخول لربط الحساب."
TOKEN_EXPIRED_MESSAGE = "انتهت صلاحية الاتصال بجوجل درايف. الرجاء إعادة تسجيل الدخول."
API_ERROR_MESSAGE = "حدث خطأ في الاتصال بجوجل درايف."


### PROVIDER TOKENS ###

def store_provider_token(data: StoreTokenRequest, caller_id: str, token_service: ProviderTokenService) -> None:
    if caller_id != data.user_id:
        logger.warning(f"User {caller_id} tried to store a Drive token for user {data.user_id}")
        raise Forbidden("Cannot store token for another user")

    expires_at = None
    if data.expires_in:
        expires_at = datetime.utcnow() + timedelta(seconds=data.expires_in)

    token_service.save(caller_id, data.provider_token, data.provider_refresh_token, expires_at=expires_at)
    logger.info(f"Provider token stored for user {caller_id}")


def get_drive_status(
    user_id: str,
    token_service: ProviderTokenService,
    drive_factory: Callable[[str], GoogleDriveClient],
) -> dict:
    token = token_service.get_valid_token(user_id)
    if not token:
        return {"connected": False, "reason": "no_token", "message": NO_TOKEN_MESSAGE}

    try:
        about = drive_factory(token).about()
    except DriveAPIError as e:
        if e.status_code is None:
            logger.error(f"Drive status check failed for user {user_id}: {e}")
            return {"connected": False, "reason": "api_error", "message": API_ERROR_MESSAGE}
        return {"connected": False, "reason": "token_expired", "message": TOKEN_EXPIRED_MESSAGE}

    token_service.store.mark_synced(user_id, datetime.utcnow())
    user = about.get("user") or {}
    return {"connected": True, "email": user.get("emailAddress"), "name": user.get("displayName")}


### PROFILE ###

def sync_profile(data: SyncProfileRequest, user_id: str, db: Session) -> Profile:
    """Upsert the caller's profile from identity-provider data without clobbering edits."""
    profiles = ProfileRepository(db)
    existing = profiles.get(user_id)

    values = {"email": data.email}
    if existing is None or not existing.full_name:
        values["full_name"] = data.full_name or ""
    if existing is None or not existing.avatar_url:
        values["avatar_url"] = data.avatar_url or ""
    return profiles.upsert(user_id, **values)


def get_profile(user_id: str, db: Session) -> Profile:
    profile = ProfileRepository(db).get(user_id)
    if profile is None:
        raise NotFound("Profile not found")
    return profile


def update_profile(user_id: str, data: ProfileUpdate, db: Session) -> Profile:
    profile = ProfileRepository(db).update(user_id, **data.model_dump(exclude_unset=True))
    if profile is None:
        raise NotFound("Profile not found")
    return profile
