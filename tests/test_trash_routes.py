import pytest
from sqlalchemy.exc import OperationalError

from conftest import OWNER, STRANGER
from drive.client import DriveAPIError
from models import FileMetadata
from repositories import FileRepository, FolderRepository, ProjectRepository


@pytest.fixture(autouse=True)
def owner_connected(connect_drive):
    connect_drive(OWNER)


def test_project_delete_restore_and_purge(client, db, auth_headers, make_project):
    project = make_project()
    headers = auth_headers()

    deleted = client.delete(f"/api/projects/{project.id}", headers=headers)
    assert deleted.status_code == 200
    assert deleted.json() == {"success": True, "message": "تم نقل المشروع إلى سلة المحذوفات", "drive_synced": True}
    assert client.get("/api/projects", headers=headers).json() == []
    assert [p["id"] for p in client.get("/api/projects/deleted", headers=headers).json()] == [project.id]
    assert client.get(f"/api/projects/{project.id}", headers=headers).status_code == 404

    restored = client.post(f"/api/projects/{project.id}/restore", headers=headers)
    assert restored.status_code == 200
    assert restored.json()["message"] == "تم استعادة المشروع بنجاح"
    assert [p["id"] for p in client.get("/api/projects", headers=headers).json()] == [project.id]

    client.delete(f"/api/projects/{project.id}", headers=headers)
    purged = client.delete(f"/api/projects/{project.id}/permanent", headers=headers)
    assert purged.status_code == 200
    assert purged.json()["message"] == "تم حذف المشروع نهائياً"
    assert client.get("/api/projects/deleted", headers=headers).json() == []


def test_purge_of_active_project_is_not_found(client, db, auth_headers, make_project):
    project = make_project()

    response = client.delete(f"/api/projects/{project.id}/permanent", headers=auth_headers())

    assert response.status_code == 404
    assert ProjectRepository(db).get(project.id) is not None


def test_folder_round_trip(client, db, auth_headers, make_project, make_folder):
    project = make_project()
    folder = make_folder(project)
    headers = auth_headers()

    assert client.delete(f"/api/folders/{folder.id}", headers=headers).json()["message"] == "تم نقل المجلد إلى سلة المحذوفات"
    trash = client.get(f"/api/projects/{project.id}/trash", headers=headers).json()
    assert [f["id"] for f in trash["folders"]] == [folder.id]

    assert client.post(f"/api/folders/{folder.id}/restore", headers=headers).status_code == 200
    assert FolderRepository(db).get(folder.id).is_deleted is False


def test_file_delete_reports_drift_when_drive_fails(client, db, drive, auth_headers, make_project, make_file):
    project = make_project()
    file = make_file(project)
    drive.trash_file.side_effect = DriveAPIError("Failed to trash file: Backend Error", 500)

    response = client.delete(f"/api/files/{file.id}", headers=auth_headers())

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["drive_synced"] is False
    assert body["warning"]
    assert FileRepository(db).get(file.id).is_deleted is True


def test_file_purge_after_soft_delete(client, db, auth_headers, make_project, make_file):
    project = make_project()
    file = make_file(project)
    headers = auth_headers()

    assert client.delete(f"/api/files/{file.id}/permanent", headers=headers).status_code == 404
    client.delete(f"/api/files/{file.id}", headers=headers)
    response = client.delete(f"/api/files/{file.id}/permanent", headers=headers)

    assert response.status_code == 200
    assert response.json()["message"] == "تم حذف الملف نهائياً"
    assert db.query(FileMetadata).filter_by(id=file.id).count() == 0


def test_file_restore_of_active_file_is_not_found(client, auth_headers, make_project, make_file):
    file = make_file(make_project())

    assert client.post(f"/api/files/{file.id}/restore", headers=auth_headers()).status_code == 404


def test_empty_trash_endpoint(client, db, auth_headers, make_project, make_folder, make_file):
    project = make_project()
    headers = auth_headers()
    kept = make_file(project, name="kept.pdf")
    for name in ("a.pdf", "b.pdf"):
        client.delete(f"/api/files/{make_file(project, name=name).id}", headers=headers)
    client.delete(f"/api/folders/{make_folder(project).id}", headers=headers)

    response = client.delete(f"/api/projects/{project.id}/trash", headers=headers)

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "تم تفريغ سلة المحذوفات"
    assert (body["files_purged"], body["folders_purged"]) == (2, 1)
    assert client.get(f"/api/projects/{project.id}/trash", headers=headers).json() == {"files": [], "folders": []}
    assert [f.id for f in FileRepository(db).list_for_project(project.id)] == [kept.id]


@pytest.mark.parametrize("method, path", [
    ("delete", "/api/projects/{project}"),
    ("post", "/api/projects/{project}/restore"),
    ("delete", "/api/projects/{project}/permanent"),
    ("get", "/api/projects/{project}/trash"),
    ("delete", "/api/projects/{project}/trash"),
    ("delete", "/api/folders/{folder}"),
    ("post", "/api/folders/{folder}/restore"),
    ("delete", "/api/folders/{folder}/permanent"),
    ("delete", "/api/files/{file}"),
    ("post", "/api/files/{file}/restore"),
    ("delete", "/api/files/{file}/permanent"),
])
def test_trash_endpoints_forbid_non_owners(client, auth_headers, make_project, make_folder, make_file, method, path):
    project = make_project()
    url = path.format(project=project.id, folder=make_folder(project).id, file=make_file(project).id)

    response = getattr(client, method)(url, headers=auth_headers(STRANGER))

    assert response.status_code == 403


@pytest.mark.parametrize("path", ["/api/projects/missing", "/api/folders/missing", "/api/files/missing"])
def test_trash_endpoints_report_missing_entities(client, auth_headers, path):
    assert client.delete(path, headers=auth_headers()).status_code == 404


def test_trash_endpoints_require_authentication(client, make_project):
    project = make_project()

    assert client.delete(f"/api/projects/{project.id}").status_code == 401


@pytest.mark.parametrize("method, path, start_deleted", [
    ("DELETE", "/api/files/{id}", False),
    ("POST", "/api/files/{id}/restore", True),
    ("DELETE", "/api/files/{id}/permanent", True),
])
def test_store_write_failure_is_a_server_error_and_leaves_row_unchanged(
    client, db, auth_headers, make_project, make_file, monkeypatch, method, path, start_deleted
):
    project = make_project()
    file = make_file(project, is_deleted=start_deleted)

    def failing_commit():
        raise OperationalError("UPDATE files_metadata", {}, Exception("database is locked"))

    monkeypatch.setattr(db, "commit", failing_commit)

    response = client.request(method, path.format(id=file.id), headers=auth_headers())

    assert response.status_code == 500
    monkeypatch.undo()
    db.expire_all()
    assert db.query(FileMetadata).filter_by(id=file.id).one().is_deleted is start_deleted
