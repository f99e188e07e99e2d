# File: src/infrastructure/external/storage/storage_client.py
import asyncio
from typing import Optional
from urllib.parse import urlparse

import aiohttp

from common.config.settings import settings
from common.logging.logger import log_info, log_warning, log_error


class StorageError(Exception):
    """Raised when the asset store refuses or fails a request."""


def extract_public_id(image_link: str) -> Optional[str]:
    """
    Derive the store's public id from an asset URL.

    ".../upload/v1731113780/artworks/sunset.jpg" -> "artworks/sunset"
    """
    if not image_link:
        return None
    path = urlparse(image_link).path
    parts = [p for p in path.split("/") if p]
    if len(parts) < 2:
        return None
    folder = parts[-2]
    file_name = parts[-1].split(".")[0]
    return f"{folder}/{file_name}"


class StorageClient:
    async def delete_asset(self, image_link: str) -> bool:
        public_id = extract_public_id(image_link)
        if not public_id:
            log_warning("No public id in asset link", extra={"image_link": image_link})
            return False

        if not settings.STORAGE_API_URL:
            log_warning("Storage API not configured, skipping asset deletion", extra={"public_id": public_id})
            return False

        url = f"{settings.STORAGE_API_URL.rstrip('/')}/resources/image/upload"
        timeout = aiohttp.ClientTimeout(total=settings.STORAGE_TIMEOUT_SECONDS)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.delete(
                    url,
                    params={"public_ids[]": public_id},
                    headers={"Authorization": f"Bearer {settings.STORAGE_API_KEY}"}
                ) as response:
                    if response.status >= 400:
                        body = await response.text()
                        log_error("Asset deletion rejected", extra={"public_id": public_id, "status": response.status, "body": body[:200]})
                        raise StorageError(f"Storage responded with {response.status}")
            log_info("Asset deleted", extra={"public_id": public_id})
            return True
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            log_error("Asset deletion failed", extra={"public_id": public_id, "error": str(e)})
            raise StorageError(str(e)) from e


storage_client = StorageClient()
