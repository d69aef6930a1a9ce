from typing import Any

from models.profile import Profile
from .base import Repository


class ProfileRepository(Repository[Profile]):
    model = Profile

    def upsert(self, profile_id: str, **values: Any) -> Profile:
        if self.get(profile_id) is None:
            return self.insert(id=profile_id, **values)
        return self.update(profile_id, **values)
