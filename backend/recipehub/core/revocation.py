# recipehub/core/revocation.py
"""
Token revocation store (blacklist) backed by Redis.

Two kinds of keys:
- ``blacklist:<token>``: presence means that single token is revoked.
- ``revoked_before:<user id>``: every access token of the user issued before
  the stored timestamp is revoked (set by "log out from all devices").

Every key expires together with the tokens it revokes, so the store never
outgrows the set of tokens that are still otherwise valid.
"""
import logging

from redis.asyncio import Redis

from recipehub.core.security import remaining_lifetime_seconds

logger = logging.getLogger("uvicorn.error")


class RevocationStore:
    KEY_PREFIX = "blacklist:"
    USER_KEY_PREFIX = "revoked_before:"

    def __init__(self, redis: Redis):
        self.redis = redis

    async def revoke(self, token: str, ttl_seconds: int) -> bool:
        """
        Mark a token as revoked for ttl_seconds.

        Returns:
            True if a key was written, False if the token had no lifetime left
        """
        if ttl_seconds <= 0:
            return False
        await self.redis.setex(self._key(token), ttl_seconds, "1")
        logger.debug("[revocation] token revoked for %ss", ttl_seconds)
        return True

    async def revoke_until(self, token: str, exp) -> bool:
        """Revoke a token for the remaining lifetime given by its "exp" claim."""
        return await self.revoke(token, remaining_lifetime_seconds(exp))

    async def is_revoked(self, token: str) -> bool:
        return bool(await self.redis.exists(self._key(token)))

    async def revoke_user_tokens(self, user_id, issued_before: float, ttl_seconds: int) -> None:
        """
        Revoke every token of user_id whose "iat" is earlier than issued_before.

        ttl_seconds should be the access-token lifetime: after that, every token
        the cutoff could apply to has expired on its own.
        """
        await self.redis.setex(self._user_key(user_id), ttl_seconds, repr(float(issued_before)))
        logger.debug("[revocation] tokens of user %s issued before %s revoked", user_id, issued_before)

    async def user_revoked_before(self, user_id) -> float | None:
        """Cutoff timestamp set by revoke_user_tokens, or None."""
        value = await self.redis.get(self._user_key(user_id))
        return float(value) if value is not None else None

    @classmethod
    def _key(cls, token: str) -> str:
        return f"{cls.KEY_PREFIX}{token}"

    @classmethod
    def _user_key(cls, user_id) -> str:
        return f"{cls.USER_KEY_PREFIX}{user_id}"
