"""
Shared fixtures: an in-memory object storage, the router on top of it, an in-memory database and the API client.
"""

from __future__ import annotations

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from tortoise import Tortoise, connections

from hybrid_storage.api.app import create_app
from hybrid_storage.exceptions import DeleteBackingFailed, SignedUrlGenerationFailed, UploadFailed
from hybrid_storage.router import StorageRouter
from hybrid_storage.settings import Settings
from hybrid_storage.strategy import StoragePolicy
from hybrid_storage.toolkit.object_storage import BaseObjectStorageService
from hybrid_storage.toolkit.tortoise_orm import get_tortoise_config

ENDPOINT = "https://account.r2.cloudflarestorage.com"
BUCKET = "admissions"


class InMemoryObjectStorage(BaseObjectStorageService):
    """Keeps the objects in a dict. Failures can be switched on per original name or per operation."""

    def __init__(self):
        self.objects: dict[str, dict] = {}
        self.deleted: list[str] = []
        self.fail_uploads_for: set[str] = set()
        self.fail_signing = False
        self.fail_deletes = False
        self.signed: list[tuple[str, int]] = []

    async def upload_file(self, content, object_key, content_type, metadata=None):
        if (metadata or {}).get("originalName") in self.fail_uploads_for:
            raise UploadFailed(f"Failed to upload to R2: quota exceeded for {object_key}")
        self.objects[object_key] = {"content": content, "content_type": content_type, "metadata": metadata}

    async def delete_file(self, object_key):
        if self.fail_deletes:
            raise DeleteBackingFailed(f"Failed to delete {object_key}: access denied")
        self.objects.pop(object_key, None)
        self.deleted.append(object_key)

    async def generate_signed_url(self, object_key, expires_in):
        if self.fail_signing:
            raise SignedUrlGenerationFailed("Failed to generate signed URL: invalid credentials")
        self.signed.append((object_key, expires_in))
        return f"{self.public_url(object_key)}?X-Amz-Expires={expires_in}&X-Amz-Signature=abc"

    def public_url(self, object_key):
        return f"{ENDPOINT}/{BUCKET}/{object_key}"


@pytest.fixture
def policy() -> StoragePolicy:
    return StoragePolicy()


@pytest.fixture
def object_storage() -> InMemoryObjectStorage:
    return InMemoryObjectStorage()


@pytest.fixture
def storage_router(policy, object_storage) -> StorageRouter:
    return StorageRouter(policy, object_storage)


@pytest.fixture
def settings() -> Settings:
    return Settings(DATABASE_URL="sqlite://:memory:", _env_file=None)


@pytest_asyncio.fixture
async def db(settings):
    """Tortoise on an in-memory SQLite database."""
    await Tortoise.init(config=get_tortoise_config(settings))
    await Tortoise.generate_schemas()
    yield
    await connections.close_all()


@pytest_asyncio.fixture
async def client(settings, object_storage, db):
    """An API client. The lifespan is not run, the database comes from the `db` fixture."""
    app = create_app(settings, object_storage=object_storage)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client
