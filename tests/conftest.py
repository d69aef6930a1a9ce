"""
Shared pytest fixtures.

Provides:
- An in-memory SQLite database per test (foreign keys enforced)
- A mocked Google Drive client and the factory that hands it out
- A token service with its own cache, backed by the test database
- A TestClient with the DB, Drive and token dependencies overridden
- Small factories for projects, folders and files
"""

import os

# Must be set before anything imports core.config
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["APP_ENV"] = "test"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["LOG_JSON"] = "0"

import time
from datetime import datetime, timedelta
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import models  # noqa: F401
from api.v1.dependencies import get_drive_factory, get_token_service
from core.db.base import Base
from core.db.dependencies import get_db
from core.db.session import enable_sqlite_foreign_keys
from drive.client import DriveFile, GoogleDriveClient
from drive.tokens import ProviderTokenCache, ProviderTokenService
from models._mixins import new_id
from repositories import DriveConnectionRepository, FileRepository, FolderRepository, ProjectRepository

OWNER = "user-owner"
STRANGER = "user-stranger"


# ============================================================================
# Database
# ============================================================================

@pytest.fixture
def engine():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    yield session
    session.close()


# ============================================================================
# Google Drive
# ============================================================================

@pytest.fixture
def drive():
    """Drive client double. Every call succeeds unless a test sets a side_effect."""
    client = MagicMock(spec=GoogleDriveClient)
    client.create_folder.side_effect = lambda name, parent_id=None: DriveFile(id=f"drive-folder-{new_id()[:8]}", name=name)
    client.upload_file.side_effect = lambda name, mime_type, data, parent_id=None: DriveFile(
        id=f"drive-file-{new_id()[:8]}",
        name=name,
        mimeType=mime_type,
        webViewLink=f"https://drive.google.com/file/d/{name}/view",
    )
    client.about.return_value = {"user": {"emailAddress": "teacher@example.com", "displayName": "Teacher"}}
    return client


@pytest.fixture
def drive_factory(drive):
    return MagicMock(return_value=drive)


@pytest.fixture
def token_cache():
    return ProviderTokenCache()


@pytest.fixture
def token_service(db, token_cache, drive_factory):
    return ProviderTokenService(DriveConnectionRepository(db), cache=token_cache, client_factory=drive_factory)


@pytest.fixture
def connect_drive(token_service):
    """Store a fresh, unexpired Drive credential for a user."""

    def _connect(user_id: str = OWNER, access_token: str = "access-token"):
        token_service.save(user_id, access_token, "refresh-token", expires_at=datetime.utcnow() + timedelta(hours=1))

    return _connect


# ============================================================================
# API client
# ============================================================================

@pytest.fixture
def client(db, drive_factory, token_service):
    from main import app

    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_drive_factory] = lambda: drive_factory
    app.dependency_overrides[get_token_service] = lambda: token_service
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def make_token(user_id: str = OWNER, expires_in: int = 3600, secret: str = "test-secret") -> str:
    return jwt.encode({"sub": user_id, "exp": int(time.time()) + expires_in}, secret, algorithm="HS256")


@pytest.fixture
def auth_headers():
    def _headers(user_id: str = OWNER) -> dict:
        return {"Authorization": f"Bearer {make_token(user_id)}"}

    return _headers


# ============================================================================
# Test data factories
# ============================================================================

@pytest.fixture
def make_project(db):
    def _make(user_id: str = OWNER, title: str = "Science Portfolio - 2025", **values):
        values.setdefault("root_drive_id", f"drive-root-{new_id()[:8]}")
        return ProjectRepository(db).insert(user_id=user_id, title=title, **values)

    return _make


@pytest.fixture
def make_folder(db):
    def _make(project, name: str = "Lesson Plans", parent=None, **values):
        values.setdefault("drive_folder_id", f"drive-folder-{new_id()[:8]}")
        return FolderRepository(db).insert(
            project_id=project.id,
            parent_id=parent.id if parent else None,
            folder_name=name,
            **values,
        )

    return _make


@pytest.fixture
def make_file(db):
    def _make(project, name: str = "worksheet.pdf", folder=None, **values):
        values.setdefault("drive_file_id", f"drive-file-{new_id()[:8]}")
        values.setdefault("mime_type", "application/pdf")
        return FileRepository(db).insert(
            project_id=project.id,
            folder_id=folder.id if folder else None,
            file_name=name,
            **values,
        )

    return _make
