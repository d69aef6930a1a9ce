from typing import Optional

from models.share_link import ShareLink
from .base import Repository


class ShareLinkRepository(Repository[ShareLink]):
    model = ShareLink

    def get_for_project(self, project_id: str) -> Optional[ShareLink]:
        return self.first(project_id=project_id)

    def get_by_slug(self, slug: str) -> Optional[ShareLink]:
        return self.first(slug=slug)
