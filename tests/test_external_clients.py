import re
import smtplib

import pytest
from aioresponses import aioresponses

from common.config.settings import settings
from infrastructure.external.email.email_client import EmailClient, EmailDeliveryError, build_message, mask_email
from infrastructure.external.storage.storage_client import StorageClient, StorageError, extract_public_id

IMAGE_LINK = "https://cdn.example.com/upload/v1731113780/artworks/sunset.jpg"
DELETE_URL = re.compile(r"^https://storage\.example\.com/resources/image/upload.*$")


def test_extract_public_id():
    assert extract_public_id(IMAGE_LINK) == "artworks/sunset"
    assert extract_public_id("") is None
    assert extract_public_id("https://cdn.example.com/sunset.jpg") is None


@pytest.mark.asyncio
async def test_delete_asset_skipped_without_storage_api(monkeypatch):
    monkeypatch.setattr(settings, "STORAGE_API_URL", "")
    assert await StorageClient().delete_asset(IMAGE_LINK) is False


@pytest.mark.asyncio
async def test_delete_asset_calls_storage_api(monkeypatch):
    monkeypatch.setattr(settings, "STORAGE_API_URL", "https://storage.example.com/")
    with aioresponses() as mocked:
        mocked.delete(DELETE_URL, status=200, payload={"deleted": {"artworks/sunset": "deleted"}})
        assert await StorageClient().delete_asset(IMAGE_LINK) is True


@pytest.mark.asyncio
async def test_delete_asset_raises_on_rejection(monkeypatch):
    monkeypatch.setattr(settings, "STORAGE_API_URL", "https://storage.example.com")
    with aioresponses() as mocked:
        mocked.delete(DELETE_URL, status=500, body="boom")
        with pytest.raises(StorageError):
            await StorageClient().delete_asset(IMAGE_LINK)


def test_build_message_headers():
    msg = build_message("admin@example.com", "Hello", "<p>Hi</p>")
    assert msg["To"] == "admin@example.com"
    assert msg["Subject"] == "Hello"
    assert msg["From"] == settings.SMTP_FROM_EMAIL
    assert msg.get_content_subtype() == "html"


def test_mask_email_hides_address():
    masked = mask_email("Admin@Example.com")
    assert masked == mask_email("admin@example.com")
    assert "@" not in masked


@pytest.mark.asyncio
async def test_mock_email_does_not_touch_smtp(monkeypatch):
    monkeypatch.setattr(settings, "MOCK_EMAIL", True)
    client = EmailClient()
    monkeypatch.setattr(client, "_deliver", lambda msg: pytest.fail("SMTP should not be used"))

    await client.send("admin@example.com", "Subject", "<p>body</p>")


@pytest.mark.asyncio
async def test_smtp_delivery_and_failure(monkeypatch):
    monkeypatch.setattr(settings, "MOCK_EMAIL", False)
    delivered = []
    client = EmailClient()
    monkeypatch.setattr(client, "_deliver", lambda msg: delivered.append(msg["Subject"]))

    await client.send("admin@example.com", "Subject", "<p>body</p>")
    assert delivered == ["Subject"]

    def refuse(msg):
        raise smtplib.SMTPRecipientsRefused({"admin@example.com": (550, b"no such user")})

    monkeypatch.setattr(client, "_deliver", refuse)
    with pytest.raises(EmailDeliveryError):
        await client.send("admin@example.com", "Subject", "<p>body</p>")
