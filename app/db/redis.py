import logging
import time

import redis
from redis.exceptions import RedisError

from app.core.config import get_settings

logger = logging.getLogger(__name__)

_client: redis.Redis | None = None


def get_redis() -> redis.Redis:
    global _client
    if _client is None:
        _client = redis.Redis.from_url(get_settings().redis_url, decode_responses=True)
    return _client


def redis_is_alive() -> bool:
    try:
        return bool(get_redis().ping())
    except RedisError:
        return False


def wait_for_redis(attempts: int, interval: float) -> None:
    for attempt in range(1, attempts + 1):
        if redis_is_alive():
            return
        logger.warning("redis_not_ready", extra={"attempt": attempt, "attempts": attempts})
        time.sleep(interval)
    raise RuntimeError(f"Redis unreachable after {attempts} attempts")


def close_redis() -> None:
    global _client
    if _client is not None:
        _client.close()
        _client = None
