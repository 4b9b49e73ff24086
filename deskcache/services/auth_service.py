"""Caches the authenticated principal for the lifetime of a session."""

import logging
from typing import Any, Dict, Optional

from deskcache.core.cache import CacheTag, TaggedTTLCache

logger = logging.getLogger(__name__)

CURRENT_USER_KEY = "current_user"
CURRENT_USER_TTL = 60 * 60 * 1000  # 1 hour
CURRENT_USER_TAGS = (CacheTag.AUTH, CacheTag.USER, CacheTag.PROFILE)


class AuthSession:
    def __init__(self, cache: TaggedTTLCache):
        self.cache = cache

    def login(self, user: Dict[str, Any]) -> None:
        self.cache.set(CURRENT_USER_KEY, user, CURRENT_USER_TTL, CURRENT_USER_TAGS)
        logger.info(f"Session started for user {user.get('id')}")

    def current_user(self) -> Optional[Dict[str, Any]]:
        return self.cache.get(CURRENT_USER_KEY)

    def is_authenticated(self) -> bool:
        return self.cache.has(CURRENT_USER_KEY)

    def update_profile(self, user: Dict[str, Any]) -> None:
        """Store the updated principal and drop stale user listings."""
        self.cache.invalidate_by_tag(CacheTag.USERS)
        self.cache.set(CURRENT_USER_KEY, user, CURRENT_USER_TTL, CURRENT_USER_TAGS)

    def logout(self) -> None:
        removed = self.cache.invalidate_by_tag(CacheTag.AUTH)
        logger.info(f"Session ended, {removed} auth entries dropped")
