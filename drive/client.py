# drive/client.py
import io
import logging
from typing import List, Optional

import httplib2
from google.auth.exceptions import RefreshError, TransportError
from google.oauth2.credentials import Credentials
from google_auth_httplib2 import AuthorizedHttp
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from googleapiclient.http import MediaIoBaseUpload
from pydantic import BaseModel, ConfigDict, Field

from core.config import settings

logger = logging.getLogger(__name__)

FOLDER_MIME_TYPE = "application/vnd.google-apps.folder"
FILE_FIELDS = "id,name,mimeType,size,thumbnailLink,webViewLink,createdTime"


class DriveAPIError(Exception):
    """A Drive call failed. status_code is None when no HTTP response was received."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class DriveFile(BaseModel):
    """Subset of the Drive v3 file resource the service relies on."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str = ""
    mime_type: str = Field("", alias="mimeType")
    size: Optional[str] = None
    thumbnail_link: Optional[str] = Field(None, alias="thumbnailLink")
    web_view_link: Optional[str] = Field(None, alias="webViewLink")
    created_time: Optional[str] = Field(None, alias="createdTime")


class GoogleDriveClient:
    """
    Client for the Google Drive v3 API acting on behalf of one user.

    The user's OAuth access token is wrapped in google-auth credentials and handed to the
    discovery-built service. Calls rely on the configured HTTP timeout only; nothing is retried.
    """

    def __init__(self, access_token: str, timeout: Optional[float] = None):
        self.access_token = access_token
        self.timeout = timeout if timeout is not None else settings.DRIVE_HTTP_TIMEOUT
        creds = Credentials(token=access_token)
        http = AuthorizedHttp(creds, http=httplib2.Http(timeout=self.timeout))
        self.service = build("drive", "v3", http=http, cache_discovery=False)

    def _execute(self, request, action: str, missing_ok: bool = False) -> Optional[dict]:
        try:
            return request.execute()
        except HttpError as e:
            if missing_ok and e.resp.status == 404:
                logger.warning(f"Drive object not found while trying to {action}; treating as done.")
                return None
            raise DriveAPIError(f"Failed to {action}: {e}", e.resp.status) from e
        except RefreshError as e:
            # No refresh token is held, so a refresh attempt means the access token was rejected.
            raise DriveAPIError(f"Failed to {action}: {e}", 401) from e
        except (TransportError, httplib2.HttpLib2Error, OSError) as e:
            raise DriveAPIError(f"Failed to {action}: {e}") from e

    def create_folder(self, name: str, parent_id: Optional[str] = None) -> DriveFile:
        metadata = {"name": name, "mimeType": FOLDER_MIME_TYPE}
        if parent_id:
            metadata["parents"] = [parent_id]

        logger.info(f"Creating Drive folder '{name}' under {parent_id or 'root'}")
        created = self._execute(
            self.service.files().create(body=metadata, fields="id,name,mimeType"),
            "create folder",
        )
        folder = DriveFile.model_validate(created)
        logger.info(f"Drive folder created: {folder.id}")
        return folder

    def upload_file(self, name: str, mime_type: str, data: bytes, parent_id: Optional[str] = None) -> DriveFile:
        """Upload in-memory bytes as a single multipart request."""
        metadata = {"name": name}
        if parent_id:
            metadata["parents"] = [parent_id]

        media = MediaIoBaseUpload(io.BytesIO(data), mimetype=mime_type or "application/octet-stream", resumable=False)
        created = self._execute(
            self.service.files().create(body=metadata, media_body=media, fields=FILE_FIELDS),
            "upload file",
        )
        uploaded = DriveFile.model_validate(created)
        logger.info(f"Uploaded '{name}' to Drive as {uploaded.id}")
        return uploaded

    def get_file(self, file_id: str) -> DriveFile:
        found = self._execute(self.service.files().get(fileId=file_id, fields=FILE_FIELDS), "get file")
        return DriveFile.model_validate(found)

    def list_files(self, folder_id: str) -> List[DriveFile]:
        listed = self._execute(
            self.service.files().list(
                q=f"'{folder_id}' in parents and trashed = false",
                fields=f"files({FILE_FIELDS})",
            ),
            "list files",
        )
        return [DriveFile.model_validate(item) for item in listed.get("files", [])]

    def trash_file(self, file_id: str) -> None:
        self._execute(
            self.service.files().update(fileId=file_id, body={"trashed": True}),
            "trash file",
            missing_ok=True,
        )

    def untrash_file(self, file_id: str) -> None:
        self._execute(
            self.service.files().update(fileId=file_id, body={"trashed": False}),
            "untrash file",
            missing_ok=True,
        )

    def delete_file(self, file_id: str) -> None:
        """Permanently delete, bypassing the Drive trash."""
        self._execute(self.service.files().delete(fileId=file_id), "delete file", missing_ok=True)

    def about(self) -> dict:
        """Who the token belongs to. Doubles as the cheapest validity probe for a token."""
        return self._execute(self.service.about().get(fields="user"), "read drive account")


def drive_client_for(access_token: str) -> GoogleDriveClient:
    return GoogleDriveClient(access_token)
