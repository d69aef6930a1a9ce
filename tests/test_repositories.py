from datetime import datetime

import pytest

from conftest import OWNER
from core.exceptions import StoreWriteFailure
from models import AuditAction, ProjectStatus
from repositories import AuditLogRepository, DriveConnectionRepository, FolderRepository, ProjectRepository


def test_soft_delete_hides_rows_from_default_listing(db, make_project):
    repo = ProjectRepository(db)
    kept = make_project(title="Kept - 2025")
    trashed = make_project(title="Trashed - 2025")

    repo.soft_delete(trashed.id, now=datetime(2025, 1, 2))

    assert [p.id for p in repo.list_for_owner(OWNER)] == [kept.id]
    assert [p.id for p in repo.list_for_owner(OWNER, is_deleted=True)] == [trashed.id]


def test_restore_clears_deletion_marker(db, make_project):
    repo = ProjectRepository(db)
    project = make_project()
    repo.soft_delete(project.id)

    restored = repo.restore(project.id)

    assert restored.is_deleted is False
    assert restored.deleted_at is None


def test_list_for_owner_filters_by_status(db, make_project):
    make_project(title="Draft - 2025", status=ProjectStatus.draft)
    active = make_project(title="Active - 2025")

    assert [p.id for p in ProjectRepository(db).list_for_owner(OWNER, status=ProjectStatus.active)] == [active.id]


def test_title_taken_ignores_trashed_projects(db, make_project):
    repo = ProjectRepository(db)
    project = make_project(title="Art - 2025")
    assert repo.title_taken(OWNER, "Art - 2025")

    repo.soft_delete(project.id)

    assert not repo.title_taken(OWNER, "Art - 2025")


def test_failed_write_rolls_back_and_raises_store_failure(db, make_project):
    repo = ProjectRepository(db)

    with pytest.raises(StoreWriteFailure):
        repo.insert(user_id=None, title="No owner")

    # The session is usable again after the rollback
    project = make_project()
    assert repo.get(project.id) is not None


def test_update_of_missing_row_returns_none(db):
    assert ProjectRepository(db).update("missing", title="x") is None
    assert ProjectRepository(db).delete("missing") is False


def test_next_sort_order_is_per_parent(db, make_project, make_folder):
    project = make_project()
    parent = make_folder(project, name="Parent", sort_order=0)
    make_folder(project, name="Sibling", sort_order=5)
    repo = FolderRepository(db)

    assert repo.next_sort_order(project.id, None) == 6
    assert repo.next_sort_order(project.id, parent.id) == 0


def test_drive_connection_upserts_tokens(db):
    repo = DriveConnectionRepository(db)

    repo.store_tokens(OWNER, "access-1", "refresh-1")
    repo.store_tokens(OWNER, "access-2", None)

    tokens = repo.get_tokens(OWNER)
    assert tokens["access_token"] == "access-2"
    assert tokens["refresh_token"] is None
    assert repo.get_tokens("nobody") is None
    assert len(repo.list(user_id=OWNER)) == 1


def test_audit_log_records_payload(db, make_project):
    project = make_project()
    repo = AuditLogRepository(db)

    repo.record(AuditAction.PROJECT_UPDATE, user_id=OWNER, project_id=project.id, payload={"title": "x"})

    entries = repo.list_for_project(project.id)
    assert [e.action for e in entries] == [AuditAction.PROJECT_UPDATE]
    assert entries[0].payload == {"title": "x"}
