# File: src/domain/moderation/services/alert_store.py
from abc import ABC, abstractmethod
from typing import Iterable, Set

from redis.asyncio import Redis

from common.config.settings import settings
from common.logging.logger import log_info

ALERTED_REPORTS_KEY = "sla:alerted_reports"


class AlertStore(ABC):
    """Remembers which (tier, report) pairs were already alerted."""

    @abstractmethod
    async def members(self) -> Set[str]:
        ...

    @abstractmethod
    async def add(self, keys: Iterable[str]) -> None:
        ...

    @abstractmethod
    async def discard(self, keys: Iterable[str]) -> None:
        ...


class MemoryAlertStore(AlertStore):
    """Process-local; every instance alerts on its own and restarts forget everything."""

    def __init__(self):
        self._keys: Set[str] = set()

    async def members(self) -> Set[str]:
        return set(self._keys)

    async def add(self, keys: Iterable[str]) -> None:
        self._keys.update(keys)

    async def discard(self, keys: Iterable[str]) -> None:
        self._keys.difference_update(keys)


class RedisAlertStore(AlertStore):
    def __init__(self, redis: Redis, key: str = ALERTED_REPORTS_KEY):
        self.redis = redis
        self.key = key

    async def members(self) -> Set[str]:
        return set(await self.redis.smembers(self.key))

    async def add(self, keys: Iterable[str]) -> None:
        keys = list(keys)
        if keys:
            await self.redis.sadd(self.key, *keys)

    async def discard(self, keys: Iterable[str]) -> None:
        keys = list(keys)
        if keys:
            await self.redis.srem(self.key, *keys)


def build_alert_store(redis: Redis = None) -> AlertStore:
    if settings.SLA_ALERT_DEDUP_BACKEND == "redis" and redis is not None:
        log_info("SLA alert dedup backed by Redis", extra={"key": ALERTED_REPORTS_KEY})
        return RedisAlertStore(redis)
    return MemoryAlertStore()
