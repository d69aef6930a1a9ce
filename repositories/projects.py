from typing import List, Optional

from models.project import Project, ProjectStatus
from .base import SoftDeleteRepository


class ProjectRepository(SoftDeleteRepository[Project]):
    model = Project

    def list_for_owner(
        self,
        user_id: str,
        status: Optional[ProjectStatus] = None,
        is_deleted: bool = False,
    ) -> List[Project]:
        filters = {"user_id": user_id}
        if status is not None:
            filters["status"] = status
        order = Project.deleted_at.desc() if is_deleted else Project.created_at.desc()
        return self.list(order_by=order, is_deleted=is_deleted, **filters)

    def title_taken(self, user_id: str, title: str) -> bool:
        return self.first(user_id=user_id, title=title, is_deleted=False) is not None
