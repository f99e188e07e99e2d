# File: infrastructure/database/redis/redis_client.py

import ssl
from typing import Optional

from redis.asyncio import Redis, ConnectionPool
from redis.exceptions import RedisError

from common.config.settings import settings
from common.exceptions.base_exception import ServiceUnavailableException
from common.logging.logger import log_info, log_error

redis_pool: Optional[ConnectionPool] = None
redis_client: Optional[Redis] = None


def _connection_kwargs() -> dict:
    kwargs = {
        "host": settings.REDIS_HOST,
        "port": settings.REDIS_PORT,
        "db": settings.REDIS_DB,
        "decode_responses": True,
    }
    if settings.REDIS_PASSWORD and settings.REDIS_PASSWORD.strip():
        kwargs["password"] = settings.REDIS_PASSWORD
    return kwargs


async def init_redis_pool() -> Redis:
    """Create the shared pool and client, failing fast when Redis is unreachable."""
    global redis_pool, redis_client
    try:
        connection_kwargs = _connection_kwargs()
        if settings.REDIS_USE_SSL:
            connection_kwargs.pop("host")
            connection_kwargs.pop("port")
            connection_kwargs.pop("db")
            connection_kwargs["ssl_cert_reqs"] = ssl.CERT_REQUIRED
            if settings.REDIS_SSL_CA_CERTS:
                connection_kwargs["ssl_ca_certs"] = settings.REDIS_SSL_CA_CERTS
            if settings.REDIS_SSL_CERT:
                connection_kwargs["ssl_certfile"] = settings.REDIS_SSL_CERT
                connection_kwargs["ssl_keyfile"] = settings.REDIS_SSL_KEY or None
            redis_pool = ConnectionPool.from_url(
                f"rediss://{settings.REDIS_HOST}:{settings.REDIS_PORT}/{settings.REDIS_DB}",
                **connection_kwargs
            )
        else:
            redis_pool = ConnectionPool(**connection_kwargs)

        redis_client = Redis(connection_pool=redis_pool)
        await redis_client.ping()
        log_info("Redis connection established", extra={
            "host": settings.REDIS_HOST,
            "port": settings.REDIS_PORT,
            "db": settings.REDIS_DB,
            "ssl": settings.REDIS_USE_SSL
        })
    except RedisError as e:
        log_error("Redis connection failed", extra={"error": str(e), "host": settings.REDIS_HOST}, exc_info=True)
        redis_pool = None
        redis_client = None
        raise ServiceUnavailableException("Redis unavailable")

    return redis_client


async def close_redis_pool():
    global redis_pool, redis_client
    if redis_client:
        await redis_client.aclose()
    if redis_pool:
        await redis_pool.disconnect()
    if redis_client or redis_pool:
        log_info("Redis connection pool closed")
    redis_pool = None
    redis_client = None


async def get_redis_client() -> Redis:
    """Dependency to get Redis client."""
    try:
        if redis_client is None:
            return await init_redis_pool()
        return redis_client
    except ServiceUnavailableException:
        raise
    except Exception as e:
        log_error("Failed to get Redis client", extra={"error": str(e)}, exc_info=True)
        raise ServiceUnavailableException("Could not connect to Redis")
