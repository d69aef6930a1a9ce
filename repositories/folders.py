from typing import List, Optional

from sqlalchemy import func

from models.folder import Folder
from .base import SoftDeleteRepository

_UNSET = object()


class FolderRepository(SoftDeleteRepository[Folder]):
    model = Folder

    def list_for_project(self, project_id: str, parent_id=_UNSET, is_deleted: bool = False) -> List[Folder]:
        filters = {"project_id": project_id}
        if parent_id is not _UNSET:
            filters["parent_id"] = parent_id
        return self.list(order_by=Folder.sort_order, is_deleted=is_deleted, **filters)

    def next_sort_order(self, project_id: str, parent_id: Optional[str]) -> int:
        current = (
            self.db.query(func.max(Folder.sort_order))
            .filter_by(project_id=project_id, parent_id=parent_id)
            .scalar()
        )
        return 0 if current is None else current + 1

    def descendants_of(self, folder_id: str) -> List[Folder]:
        """Every folder below folder_id, trashed or not."""
        found: List[Folder] = []
        pending = [folder_id]
        while pending:
            children = self.db.query(Folder).filter_by(parent_id=pending.pop()).all()
            found.extend(children)
            pending.extend(child.id for child in children)
        return found
