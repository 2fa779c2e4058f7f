import redis

from app.core.config import get_settings
from app.core.security import generate_session_token
from app.db.redis import get_redis

SESSION_KEY_PREFIX = "auth_"


class SessionStore:
    """Maps opaque session tokens to user ids with a fixed expiry."""

    def __init__(self, client: redis.Redis, ttl_seconds: int) -> None:
        self.client = client
        self.ttl_seconds = ttl_seconds

    @staticmethod
    def _key(token: str) -> str:
        return f"{SESSION_KEY_PREFIX}{token}"

    def create(self, user_id: str) -> str:
        token = generate_session_token()
        self.client.set(self._key(token), user_id, ex=self.ttl_seconds)
        return token

    def resolve(self, token: str | None) -> str | None:
        if not token:
            return None
        return self.client.get(self._key(token))

    def revoke(self, token: str) -> None:
        self.client.delete(self._key(token))


def get_session_store() -> SessionStore:
    return SessionStore(get_redis(), get_settings().session_ttl_seconds)
