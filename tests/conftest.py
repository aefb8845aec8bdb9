"""Pytest fixtures."""

import json
import os
from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import UUID, uuid4

# Settings are read at import time; these must be in place first.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_ANON_KEY", "public-anon-key")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "service-role-secret-key")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret-that-is-long-enough-for-hs256")

import httpx
import jwt
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.auth.auth import token_required
from app.dependencies import get_storage_service
from app.errors import NotFoundError, PersistError
from app.main import app
from config.database import get_db
from config.settings import settings
from models.base import Base
from schemas.staff import StaffRecord
from services.change_feed import StaffChangeFeed
from services.images import CapturedFrame
from services.storage_service import StorageService

BUCKET = "staff-photos"
SUPABASE_URL = "https://test-project.supabase.co"

# Smallest byte strings the magic-number check accepts, padded out.
JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"\x00\x10JFIF\x00" + bytes(range(256)) * 8
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00\x00\x00\rIHDR" + bytes(64)


class FakeStorageBackend:
    """In-memory stand-in for the Supabase Storage REST API."""

    def __init__(self):
        self.objects: dict[tuple[str, str], bytes] = {}
        self.requests: list[httpx.Request] = []
        self.fail_uploads = False
        self.fail_deletes = False

    @property
    def upload_count(self) -> int:
        return sum(1 for r in self.requests if r.method == "POST")

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if request.method == "GET" and path.startswith("/storage/v1/object/public/"):
            bucket, _, key = path[len("/storage/v1/object/public/") :].partition("/")
            if (bucket, key) not in self.objects:
                return httpx.Response(404, json={"error": "not_found"})
            return httpx.Response(200, content=self.objects[(bucket, key)])

        if request.method == "POST" and path.startswith("/storage/v1/object/"):
            bucket, _, key = path[len("/storage/v1/object/") :].partition("/")
            if self.fail_uploads:
                return httpx.Response(500, json={"error": "quota exceeded"})
            if (bucket, key) in self.objects and request.headers.get("x-upsert") != "true":
                return httpx.Response(409, json={"error": "Duplicate", "message": "exists"})
            self.objects[(bucket, key)] = request.content
            return httpx.Response(200, json={"Key": f"{bucket}/{key}"})

        if request.method == "DELETE" and path.startswith("/storage/v1/object/"):
            bucket = path[len("/storage/v1/object/") :]
            if self.fail_deletes:
                return httpx.Response(500, json={"error": "storage down"})
            removed = []
            for key in json.loads(request.content)["prefixes"]:
                if self.objects.pop((bucket, key), None) is not None:
                    removed.append({"name": key})
            return httpx.Response(200, json=removed)

        return httpx.Response(400, json={"error": "unexpected request"})

    def fetch(self, url: str) -> httpx.Response:
        """GET a public URL through the fake."""
        with httpx.Client(transport=httpx.MockTransport(self.handle)) as client:
            return client.get(url)


class InMemoryStaffRepository:
    """Record store double with the StaffRepository interface."""

    def __init__(self):
        self.rows: dict[UUID, StaffRecord] = {}
        self.calls: list[str] = []
        self.fail_writes = False
        self._clock = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def _tick(self) -> datetime:
        self._clock += timedelta(seconds=1)
        return self._clock

    def insert(self, fields: dict[str, Any]) -> StaffRecord:
        self.calls.append("insert")
        if self.fail_writes:
            raise PersistError("connection refused")
        now = self._tick()
        record = StaffRecord(id=uuid4(), created_at=now, updated_at=now, **fields)
        self.rows[record.id] = record
        return record

    def update(self, record_id: UUID, fields: dict[str, Any]) -> StaffRecord:
        self.calls.append("update")
        if self.fail_writes:
            raise PersistError("connection refused")
        current = self.select_by_id(record_id).model_dump(exclude={"status"})
        self.rows[record_id] = StaffRecord(**{**current, **fields, "updated_at": self._tick()})
        return self.rows[record_id]

    def select_all(self) -> list[StaffRecord]:
        self.calls.append("select_all")
        return sorted(self.rows.values(), key=lambda r: r.created_at, reverse=True)

    def select_by_id(self, record_id: UUID) -> StaffRecord:
        self.calls.append("select_by_id")
        if record_id not in self.rows:
            raise NotFoundError(f"Staff record {record_id} not found")
        return self.rows[record_id]

    def delete(self, record_id: UUID) -> None:
        self.calls.append("delete")
        if self.fail_writes:
            raise PersistError("connection refused")
        self.select_by_id(record_id)
        del self.rows[record_id]


@pytest.fixture
def storage_backend() -> FakeStorageBackend:
    return FakeStorageBackend()


@pytest.fixture
def storage(storage_backend: FakeStorageBackend) -> StorageService:
    return StorageService(
        base_url=SUPABASE_URL,
        api_key="service-role-secret-key",
        bucket=BUCKET,
        transport=httpx.MockTransport(storage_backend.handle),
    )


@pytest.fixture
def repository() -> InMemoryStaffRepository:
    return InMemoryStaffRepository()


@pytest.fixture
def change_feed() -> StaffChangeFeed:
    return StaffChangeFeed()


@pytest.fixture
def jpeg_frame() -> CapturedFrame:
    """A ~2KB JPEG payload."""
    return CapturedFrame(data=JPEG_BYTES, content_type="image/jpeg", filename="jane.jpg")


@pytest.fixture
def db_session() -> Session:
    """Session on a fresh in-memory SQLite database."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def staging_dir(tmp_path, monkeypatch):
    path = tmp_path / "uploads"
    monkeypatch.setattr(settings, "upload_staging_dir", str(path))
    return path


HR_USER = {"user_id": "hr-user", "email": "hr@example.com", "role": "hr", "token": {}}


@pytest.fixture
def client(db_session: Session, storage: StorageService, staging_dir) -> TestClient:
    """API client with the database and storage replaced, signed in as HR."""

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage_service] = lambda: storage
    app.dependency_overrides[token_required] = lambda: HR_USER
    app.state.change_feed = StaffChangeFeed()
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()


def make_token(email: str, sub: str = "user-1", **claims: Any) -> str:
    """Sign a Supabase-style access token with the test secret."""
    payload = {
        "sub": sub,
        "email": email,
        "aud": settings.jwt_audience,
        "exp": datetime.now(timezone.utc) + timedelta(hours=1),
        **claims,
    }
    return jwt.encode(payload, settings.supabase_jwt_secret, algorithm="HS256")
