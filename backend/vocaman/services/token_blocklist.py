import logging
import time

import redis

logger = logging.getLogger(__name__)


class TokenBlocklist:
    """
    已注销刷新令牌的黑名单，以 jti 为键存放在 Redis 中，
    键的过期时间与令牌本身的过期时间一致。
    """
    KEY_PREFIX = "vocaman:revoked_token:"

    def __init__(self, redis_client: redis.Redis):
        self.redis_client = redis_client

    def _key(self, jti: str) -> str:
        return f"{self.KEY_PREFIX}{jti}"

    def revoke(self, jti: str, expires_at: int) -> None:
        """
        Args:
            jti: 令牌唯一标识
            expires_at: 令牌过期时间（Unix 时间戳）
        """
        ttl = max(int(expires_at - time.time()), 1)
        self.redis_client.setex(self._key(jti), ttl, b"1")
        logger.info(f"Refresh token {jti} revoked for {ttl}s")

    def is_revoked(self, jti: str) -> bool:
        return bool(self.redis_client.exists(self._key(jti)))
