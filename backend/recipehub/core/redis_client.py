# recipehub/core/redis_client.py
"""
Redis client factory.
The revocation store (token blacklist) lives in Redis and is shared by the
HTTP auth dependency and the WebSocket gateway.
"""
from redis import asyncio as aioredis

from recipehub.config import settings


def build_redis_client(url: str | None = None) -> aioredis.Redis:
    """
    Create an asyncio Redis client. No connection is opened until the first command.
    """
    return aioredis.from_url(
        url or settings.redis_url,
        decode_responses=True,
        socket_connect_timeout=2,
        socket_timeout=5,
        health_check_interval=30,
        retry_on_timeout=True,
    )
