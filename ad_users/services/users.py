"""User lifecycle operations on top of the directory client.

`UserService` owns a `UserCache` of lookups keyed by username. Reads go
through the cache; every write drops the affected entries so the next read
goes back to the directory. Directory calls run in a worker thread because
ldap3 is synchronous.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Mapping

from ldap3.utils.dn import escape_rdn

from ..ad import ADAuthenticationError, ADClient, ADEntryExistsError, ADError
from ..ad.utils import escape_ldap_filter_value
from ..ad_utils import strip_domain
from ..utils.dn import (
    location_from_dn,
    normalize_location,
    parse_location,
    rename_leaf,
    split_dn,
    upper_dc,
)
from ..utils.passwords import (
    DEFAULT_POOLS,
    PasswordPools,
    create_password,
    encode_password,
    ssha256,
)
from ..utils.validation import is_blank, is_correct_email
from .cache import UserCache
from .errors import (
    AuthResult,
    InvalidUserError,
    UserCreationError,
    UserError,
    UserExistsError,
    UserNotFoundError,
    UserRemovalError,
)
from .results import process_results

log = logging.getLogger(__name__)

# userAccountControl values.
NORMAL_ACCOUNT = 512
DISABLED_ACCOUNT = 514
DONT_EXPIRE_PASSWORD = 66048

USER_OBJECT_CLASS = ["top", "person", "organizationalPerson", "user"]

# Keys of update_user() options that are not written as raw attributes.
_INTERPRETED_KEYS = frozenset({"commonName", "passwordExpires", "enabled"})


@dataclass
class CreatedUser:
    user: dict[str, Any]
    password: str


class UserService:
    """Cache-backed facade for user operations.

    Parameters
    ----------
    client
        Directory client. Its ``cfg`` supplies the domain and base DN.
    cache
        Lookup cache, a fresh one is created when omitted.
    pools
        Character pools for generated passwords.
    """

    is_correct_email = staticmethod(is_correct_email)
    normalize_location = staticmethod(normalize_location)

    def __init__(
        self,
        client: ADClient,
        cache: UserCache | None = None,
        pools: PasswordPools = DEFAULT_POOLS,
    ) -> None:
        self.client = client
        self.cfg = client.cfg
        self.cache = cache if cache is not None else UserCache()
        self.pools = pools

        self._password_expiry_ops: dict[bool, Callable[[str], Awaitable[None]]] = {
            True: self.enable_user,
            False: self.set_user_password_never_expires,
        }
        self._enabled_ops: dict[bool, Callable[[str], Awaitable[None]]] = {
            True: self.enable_user,
            False: self.disable_user,
        }

    def create_password(self) -> str:
        return create_password(self.pools)

    async def _call(self, fn: Callable[..., Any], *args: Any) -> Any:
        return await asyncio.to_thread(fn, *args)

    async def _require_user(self, username: str) -> dict[str, Any]:
        user = await self.find_user(username)
        if not user:
            raise UserNotFoundError()
        return user

    @staticmethod
    def _shape(opts: Mapping[str, Any] | None, record: dict[str, Any]) -> dict[str, Any]:
        if not record:
            return {}
        shaped = process_results(opts, [record])
        return shaped[0] if shaped else {}

    async def find_user(
        self, username: str, opts: Mapping[str, Any] | None = None
    ) -> dict[str, Any]:
        """Look up a user by ``sAMAccountName`` or principal name.

        Returns an empty dict if there is no such user. Results, including
        misses, are cached until the user is modified through this service.
        """
        name = strip_domain(str(username or ""))
        if not name:
            return {}

        cached = self.cache.get(name)
        if cached is not None:
            log.debug("User cache hit for %s", name)
            return self._shape(opts, cached)

        safe = escape_ldap_filter_value(name)
        principal = escape_ldap_filter_value(self.cfg.principal(name))
        flt = f"(|(userPrincipalName={principal})(sAMAccountName={safe}))"
        records = await self._call(self.client.find, flt)
        record = records[0] if records else {}
        self.cache.set(name, record)
        log.debug("User cache miss for %s (found=%s)", name, bool(record))
        return self._shape(opts, record)

    async def get_all_users(self, opts: Mapping[str, Any] | None = None) -> list[dict[str, Any]]:
        records = await self._call(self.client.find_by_object_class, "user")
        return process_results(opts, records)

    async def add_user(
        self, user: Mapping[str, Any], location: str | None = None
    ) -> CreatedUser:
        """Create an enabled user with a generated password.

        The account is created under ``location`` (default ``CN=Users``),
        then its password is set and the account enabled as separate writes.
        """
        attrs = dict(user or {})
        if not is_correct_email(attrs.get("mail")):
            raise InvalidUserError(f"Incorrect email address: {attrs.get('mail')}")
        if is_blank(attrs.get("sAMAccountName")):
            raise InvalidUserError("sAMAccountName not specified")

        sam = str(attrs["sAMAccountName"]).strip()
        attrs["sAMAccountName"] = sam
        password = self.create_password()
        attrs["userPassword"] = ssha256(password)
        attrs["objectClass"] = list(USER_OBJECT_CLASS)
        dn = f"CN={escape_rdn(sam)},{normalize_location(location)}{self.cfg.base_dn}"

        try:
            await self._call(self.client.add, dn, attrs)
        except ADEntryExistsError as e:
            raise UserExistsError(f"User {sam} already exists.") from e
        except ADError as e:
            # sAMAccountName already taken by an object in another container.
            if e.description == "constraintViolation":
                raise UserExistsError(f"User {sam} already exists.") from e
            log.warning("Creating user %s failed: %s", sam, e)
            raise UserCreationError(f"Error creating user: {e}") from e

        # A miss may have been cached before the account existed.
        self.cache.invalidate(sam)
        try:
            await self.set_user_password(sam, password)
            await self.enable_user(sam)
        except (ADError, UserError) as e:
            log.warning("Creating user %s failed: %s", sam, e)
            raise UserCreationError(f"Error creating user: {e}") from e

        log.info("Created user %s at %s", sam, dn)
        return CreatedUser(user=attrs, password=password)

    async def update_user(self, username: str, opts: Mapping[str, Any]) -> None:
        """Apply a set of changes to a user.

        ``commonName``, ``passwordExpires`` and ``enabled`` are interpreted;
        every other key is written as an attribute. The first failing write
        aborts the rest.
        """
        opts = dict(opts or {})
        await self.find_user(username)

        if "commonName" in opts:
            await self.set_user_cn(username, opts["commonName"])
        if "passwordExpires" in opts:
            await self._password_expiry_ops[opts["passwordExpires"] is not False](username)
        if "enabled" in opts:
            await self._enabled_ops[opts["enabled"] is not False](username)

        operations: list[dict[str, Any]] = []
        for key, value in opts.items():
            if key in _INTERPRETED_KEYS:
                continue
            if key == "unicodePwd":
                value = encode_password(value)
            operations.append({key: value})

        current = username
        for attrs in reversed(operations):
            await self.set_user_property(current, attrs)
            previous = current
            if "userPrincipalName" in attrs:
                current = str(attrs["userPrincipalName"])
            self.cache.invalidate(previous, current)

        self.cache.invalidate(username, current)

    async def user_exists(self, username: str) -> bool:
        principal = self.cfg.principal(strip_domain(username))
        return bool(await self._call(self.client.user_exists, principal))

    async def user_is_member_of(self, username: str, group_name: str) -> bool:
        user = await self.find_user(username)
        user_dn = str(user.get("dn") or "").lower()
        if not user_dn:
            return False
        members = await self._call(self.client.get_group_users, group_name)
        return any(str(m.get("dn") or "").lower() == user_dn for m in members)

    async def authenticate_user(self, username: str, password: str) -> AuthResult:
        """Check credentials.

        Rejected credentials come back as an unauthorized `AuthResult`;
        directory or transport failures are raised.
        """
        principal = self.cfg.principal(strip_domain(username))
        try:
            authorized = await self._call(self.client.authenticate, principal, password)
        except ADAuthenticationError as e:
            log.info("Authentication rejected for %s", principal)
            return AuthResult(
                authorized=False,
                detail=e.message,
                message=e.description or type(e).__name__,
            )
        return AuthResult(authorized=bool(authorized))

    async def _user_replace(self, username: str, attrs: dict[str, Any]) -> None:
        user = await self._require_user(username)
        await self._call(self.client.replace, user["dn"], attrs)
        self.cache.invalidate(username)

    async def set_user_property(self, username: str, attrs: dict[str, Any]) -> None:
        await self._user_replace(username, attrs)

    async def set_user_password(self, username: str, password: str) -> None:
        if not password:
            raise InvalidUserError("No password provided.")
        await self._user_replace(username, {"unicodePwd": encode_password(password)})
        log.info("Password set for %s", username)

    async def set_user_password_never_expires(self, username: str) -> None:
        await self._user_replace(username, {"userAccountControl": DONT_EXPIRE_PASSWORD})

    async def enable_user(self, username: str) -> None:
        await self._user_replace(username, {"userAccountControl": NORMAL_ACCOUNT})
        log.info("Enabled user %s", username)

    async def disable_user(self, username: str) -> None:
        await self._user_replace(username, {"userAccountControl": DISABLED_ACCOUNT})
        log.info("Disabled user %s", username)

    async def unlock_user(self, username: str) -> None:
        await self._user_replace(username, {"lockoutTime": 0})

    async def set_user_cn(self, username: str, cn: str) -> None:
        if is_blank(cn):
            raise InvalidUserError("Common name not specified")
        user = await self._require_user(username)
        await self._call(self.client.modify_dn, user["dn"], rename_leaf(user["dn"], cn))
        self.cache.invalidate(username)

    async def move_user(self, username: str, location: str) -> None:
        """Move a user to another container.

        ``location`` is a path such as ``EMEA/Sales`` or a DN fragment.
        """
        target = parse_location(location)
        user = await self._require_user(username)
        cn = user.get("cn")
        leaf = f"CN={escape_rdn(str(cn))}" if cn else split_dn(user["dn"])[0]
        new_dn = f"{leaf},{target}{upper_dc(self.cfg.base_dn)}"
        await self._call(self.client.modify_dn, user["dn"], new_dn)
        self.cache.invalidate(username)

    async def get_user_location(self, username: str) -> str:
        user = await self._require_user(username)
        return location_from_dn(user["dn"])

    async def remove_user(self, username: str) -> None:
        user = await self._require_user(username)
        try:
            await self._call(self.client.delete, user["dn"])
        except ADError as e:
            raise UserRemovalError(e.message) from e
        self.cache.invalidate(username)
        log.info("Removed user %s", username)
