from __future__ import annotations

import logging
from typing import Any

from ..ad_utils import strip_domain

log = logging.getLogger(__name__)


def cache_key(username: str) -> str:
    """Lookup key for a username: local part, stripped, lower-cased."""
    return strip_domain(username).lower()


class UserCache:
    """Per-username cache of directory lookups.

    Values are user records; an empty dict records that the user was not
    found. Entries never expire on their own, they live until `invalidate`
    or `clear`.
    """

    def __init__(self) -> None:
        self._users: dict[str, dict[str, Any]] = {}

    def __contains__(self, username: str) -> bool:
        return cache_key(username) in self._users

    def __len__(self) -> int:
        return len(self._users)

    def get(self, username: str) -> dict[str, Any] | None:
        return self._users.get(cache_key(username))

    def set(self, username: str, record: dict[str, Any]) -> None:
        self._users[cache_key(username)] = record

    def invalidate(self, *usernames: str) -> None:
        for username in usernames:
            if self._users.pop(cache_key(username), None) is not None:
                log.debug("Invalidated cached user %s", username)

    def clear(self) -> None:
        self._users.clear()
