from typing import Callable

from fastapi import Depends
from sqlalchemy.orm import Session

from core.db.dependencies import get_db
from drive.client import GoogleDriveClient, drive_client_for
from drive.tokens import ProviderTokenService, token_cache
from repositories import DriveConnectionRepository


def get_drive_factory() -> Callable[[str], GoogleDriveClient]:
    return drive_client_for


def get_token_service(
    db: Session = Depends(get_db),
    drive_factory: Callable[[str], GoogleDriveClient] = Depends(get_drive_factory),
) -> ProviderTokenService:
    return ProviderTokenService(DriveConnectionRepository(db), cache=token_cache, client_factory=drive_factory)
