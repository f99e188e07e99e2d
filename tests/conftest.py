import os

os.environ.setdefault("ACCESS_SECRET", "test-access-secret")
os.environ["ENVIRONMENT"] = "test"
os.environ["MOCK_EMAIL"] = "true"
os.environ["SLA_MONITOR_ENABLED"] = "false"
os.environ["SENTRY_DSN"] = ""
os.environ["STORAGE_API_URL"] = ""

from datetime import timedelta
from typing import Optional

import pytest
import pytest_asyncio
from fakeredis.aioredis import FakeRedis
from httpx import ASGITransport, AsyncClient
from jose import jwt
from mongomock_motor import AsyncMongoMockClient

from common.config.settings import settings
from common.utils.date_utils import utc_now, truncate_to_millis
from infrastructure.database.mongodb.connection import MongoDBConnection
from infrastructure.external.storage.storage_client import StorageError

TEST_DB_NAME = "artmart_test"


# === Side-effect doubles ===

class RecordingEmailClient:
    def __init__(self, fail: bool = False):
        self.sent = []
        self.fail = fail

    async def send(self, to_email: str, subject: str, body_html: str) -> None:
        if self.fail:
            raise RuntimeError("smtp down")
        self.sent.append({"to": to_email, "subject": subject, "body": body_html})


class RecordingStorage:
    def __init__(self, fail: bool = False):
        self.deleted = []
        self.fail = fail

    async def delete_asset(self, image_link: str) -> bool:
        if self.fail:
            raise StorageError("storage down")
        self.deleted.append(image_link)
        return True


# === Fixtures ===

@pytest.fixture
def mongo_client():
    client = AsyncMongoMockClient()
    yield client
    client.close()


@pytest.fixture
def db(mongo_client):
    return mongo_client[TEST_DB_NAME]


@pytest_asyncio.fixture
async def redis():
    client = FakeRedis(decode_responses=True)
    try:
        yield client
    finally:
        await client.flushall()
        await client.aclose()


@pytest.fixture
def email_outbox():
    return RecordingEmailClient()


@pytest.fixture
def storage():
    return RecordingStorage()


@pytest_asyncio.fixture
async def api_client(mongo_client):
    from main import app

    MongoDBConnection.use_database(mongo_client, TEST_DB_NAME)
    app.state.sla_monitor = None
    transport = ASGITransport(app=app)
    try:
        async with AsyncClient(transport=transport, base_url="http://testserver") as client:
            yield client
    finally:
        app.state.sla_monitor = None
        MongoDBConnection._client = None
        MongoDBConnection._db = None


# === Seed helpers ===

def make_token(user_id: str, role: str = "user") -> str:
    now = utc_now()
    claims = {
        "sub": user_id,
        "role": role,
        "aud": settings.ACCESS_AUDIENCE,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(hours=1)).timestamp()),
    }
    return jwt.encode(claims, settings.ACCESS_SECRET, algorithm=settings.ALGORITHM)


def auth_headers(user_id: str, role: str = "user") -> dict:
    return {"Authorization": f"Bearer {make_token(user_id, role)}"}


async def seed_user(db, name: str, email: Optional[str] = None, **fields) -> str:
    document = {
        "name": name,
        "email": email if email is not None else f"{name.lower().replace(' ', '.')}@example.com",
        "profile_picture_link": None,
        "moderation_status": "active",
        "warning_count": 0,
        **fields,
    }
    result = await db["users"].insert_one(document)
    return str(result.inserted_id)


async def seed_image(db, owner_id: str, name: str = "Sunset", category: str = "paintings", **fields) -> str:
    document = {
        "user_id": owner_id,
        "artist_name": "Artist",
        "name": name,
        "description": f"{name} in oil",
        "price": 120.0,
        "image_link": f"https://cdn.example.com/upload/v1/artworks/{name.lower()}.jpg",
        "views": 0,
        "category": category,
        "sold_status": False,
        "created_at": utc_now(),
        **fields,
    }
    result = await db["images"].insert_one(document)
    return str(result.inserted_id)


async def seed_report(
    db,
    reporter_id: str,
    target_user_id: str,
    deadline_in: timedelta = timedelta(hours=24),
    status: str = "pending",
    reason: str = "spam",
    target_image_id: Optional[str] = None,
    now=None,
    **fields
) -> str:
    now = truncate_to_millis(now or utc_now())
    document = {
        "reporter_user_id": reporter_id,
        "target_type": "image" if target_image_id else "user",
        "target_image_id": target_image_id,
        "target_user_id": target_user_id,
        "reason": reason,
        "description": "",
        "status": status,
        "sla_deadline": now + deadline_in,
        "sla_breached": False,
        "resolved_at": None,
        "resolved_by_admin_id": None,
        "resolution_action": None,
        "resolution_notes": None,
        "content_snapshot": {},
        "created_at": now,
        "updated_at": now,
        **fields,
    }
    result = await db["reports"].insert_one(document)
    return str(result.inserted_id)
