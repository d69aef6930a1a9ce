from typing import List, Optional

from models.file import FileMetadata
from .base import SoftDeleteRepository


class FileRepository(SoftDeleteRepository[FileMetadata]):
    model = FileMetadata

    def list_for_project(self, project_id: str, is_deleted: bool = False) -> List[FileMetadata]:
        return self.list(order_by=FileMetadata.created_at, is_deleted=is_deleted, project_id=project_id)

    def list_for_folder(self, project_id: str, folder_id: Optional[str]) -> List[FileMetadata]:
        return self.list(order_by=FileMetadata.created_at, project_id=project_id, folder_id=folder_id)

    def find_active_by_name(self, project_id: str, folder_id: Optional[str], file_name: str) -> Optional[FileMetadata]:
        return self.first(project_id=project_id, folder_id=folder_id, file_name=file_name, is_deleted=False)

    def in_folders(self, folder_ids: List[str]) -> List[FileMetadata]:
        """Files directly inside any of folder_ids, trashed or not."""
        if not folder_ids:
            return []
        return self.db.query(FileMetadata).filter(FileMetadata.folder_id.in_(folder_ids)).all()
