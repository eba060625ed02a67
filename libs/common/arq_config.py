"""arq (async Redis queue) settings for the background worker.

Turns ``REDIS_URL`` into the ``RedisSettings`` arq connects with. A
``rediss://`` URL switches on TLS.
"""

from urllib.parse import urlparse

from arq.connections import RedisSettings
from libs.common.config import get_settings


def get_redis_settings(redis_url: str | None = None) -> RedisSettings:
    """Build arq RedisSettings from ``redis_url`` or the configured REDIS_URL."""
    parsed = urlparse(redis_url or get_settings().REDIS_URL)

    return RedisSettings(
        host=parsed.hostname or "localhost",
        port=parsed.port or 6379,
        database=int(parsed.path.lstrip("/") or "0"),
        username=parsed.username,
        password=parsed.password,
        ssl=parsed.scheme == "rediss",
    )
