"""Password helpers: generation, SSHA-256 hashing and AD wire encoding."""

from __future__ import annotations

import base64
import hashlib
import os
import secrets
from dataclasses import dataclass

SSHA256_PREFIX = "{SSHA256}"
SALT_SIZE = 8


@dataclass(frozen=True)
class PasswordPools:
    """Character pools used by `create_password`."""

    specials: str = "!$%&/()=?_-{}*"
    digits: str = "0123456789"
    letters: str = "qwertyuiopasdfghjklzxcvbnm"

    def __post_init__(self) -> None:
        for name in ("specials", "digits", "letters"):
            if not getattr(self, name):
                raise ValueError(f"Password pool {name!r} is empty")


DEFAULT_POOLS = PasswordPools()


def random_string(source: str, length: int) -> str:
    return "".join(secrets.choice(source) for _ in range(length))


def create_password(pools: PasswordPools = DEFAULT_POOLS) -> str:
    """Generate a 9 character password.

    Layout is fixed: 1 special, 3 digits, 2 uppercase letters, 3 lowercase
    letters.
    """
    special = random_string(pools.specials, 1)
    digits = random_string(pools.digits, 3)
    upper = random_string(pools.letters, 2).upper()
    lower = random_string(pools.letters, 3)
    return f"{special}{digits}{upper}{lower}"


def ssha256(password: str, salt: bytes | None = None) -> str:
    """Salted SHA-256 hash in ``{SSHA256}base64(digest + salt)`` form."""
    if salt is None:
        salt = os.urandom(SALT_SIZE)
    digest = hashlib.sha256(password.encode("utf-8") + salt).digest()
    return SSHA256_PREFIX + base64.b64encode(digest + salt).decode("ascii")


def encode_password(password: str) -> bytes:
    """Encode a password for the AD ``unicodePwd`` attribute."""
    return f'"{password}"'.encode("utf-16-le")
