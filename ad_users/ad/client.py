from __future__ import annotations

import logging
import ssl
from contextlib import contextmanager
from typing import Any, Iterator

from ldap3 import (
    ALL,
    ALL_ATTRIBUTES,
    MODIFY_REPLACE,
    SUBTREE,
    Connection,
    Server,
    Tls,
)
from ldap3.core.exceptions import LDAPException

from ..ad_utils import strip_domain
from ..utils.dn import split_dn
from .exceptions import ADAuthenticationError, ADConnectionError, ADError
from .models import ADConfig
from .utils import entry_to_record, escape_ldap_filter_value, to_ldap_values

log = logging.getLogger(__name__)

# Result codes that mean "the search ran but matched nothing".
_EMPTY_SEARCH_RESULTS = (0, 4)

# AD extensible match rule walking nested group membership.
_IN_CHAIN = "1.2.840.113556.1.4.1941"


class ADClient:
    """Synchronous Active Directory client.

    Every call opens its own connection, binds with the service principal,
    runs one operation and unbinds. Failures raise `ADError` subclasses.
    """

    def __init__(self, cfg: ADConfig) -> None:
        self.cfg = cfg

        tls_kwargs: dict[str, Any] = {
            "validate": ssl.CERT_REQUIRED if cfg.tls_validate else ssl.CERT_NONE,
        }
        # Apply custom CA only when verification is enabled.
        if cfg.tls_validate and cfg.ca_file:
            tls_kwargs["ca_certs_file"] = cfg.ca_file

        self.server = Server(
            host=cfg.host,
            port=cfg.port,
            use_ssl=cfg.use_ssl,
            get_info=ALL,
            tls=Tls(**tls_kwargs),
            connect_timeout=float(cfg.connect_timeout),
        )

    def _conn(self, user: str, password: str) -> Connection:
        conn = Connection(self.server, user=user, password=password, auto_bind=False)
        conn.open()
        if self.cfg.starttls:
            conn.start_tls()
        return conn

    @contextmanager
    def _service_conn(self) -> Iterator[Connection]:
        """Yield a connection bound with the service credentials."""
        try:
            conn = self._conn(self.cfg.bind_principal, self.cfg.bind_password)
        except LDAPException as e:
            raise ADConnectionError(f"LDAP connection failed: {e}") from e

        try:
            if not conn.bind():
                raise ADConnectionError.from_result("Service bind", conn.result)
            yield conn
        except LDAPException as e:
            raise ADConnectionError(f"LDAP error: {e}") from e
        finally:
            try:
                conn.unbind()
            except LDAPException:
                log.debug("Unbind failed", exc_info=True)

    def _search(
        self,
        conn: Connection,
        search_filter: str,
        attributes: Any = ALL_ATTRIBUTES,
        size_limit: int = 0,
    ) -> list[dict[str, Any]]:
        ok = conn.search(
            search_base=self.cfg.base_dn,
            search_filter=search_filter,
            search_scope=SUBTREE,
            attributes=attributes,
            size_limit=size_limit,
        )
        if not ok:
            res = dict(conn.result or {})
            if res.get("result") not in _EMPTY_SEARCH_RESULTS:
                raise ADError.from_result("Search", res)
        records: list[dict[str, Any]] = []
        for entry in conn.response or []:
            record = entry_to_record(entry)
            if record is not None:
                records.append(record)
        return records

    def find(self, search_filter: str, attributes: Any = ALL_ATTRIBUTES) -> list[dict[str, Any]]:
        """Run a subtree search under the base DN and return plain records."""
        with self._service_conn() as conn:
            records = self._search(conn, search_filter, attributes)
        log.debug("LDAP search %s returned %d entries", search_filter, len(records))
        return records

    def find_by_object_class(
        self, object_class: str, attributes: Any = ALL_ATTRIBUTES
    ) -> list[dict[str, Any]]:
        """Return every object of the given class, using paged search."""
        flt = f"(objectClass={escape_ldap_filter_value(object_class)})"
        if object_class == "user":
            flt = "(&(objectCategory=person)(objectClass=user))"

        items: list[dict[str, Any]] = []
        with self._service_conn() as conn:
            for entry in conn.extend.standard.paged_search(
                search_base=self.cfg.base_dn,
                search_filter=flt,
                search_scope=SUBTREE,
                attributes=attributes,
                paged_size=1000,
                generator=True,
            ):
                record = entry_to_record(entry)
                if record is not None:
                    items.append(record)
            # paged_search only raises when the connection has raise_exceptions.
            res = dict(conn.result or {})
            if res.get("result") not in _EMPTY_SEARCH_RESULTS:
                raise ADError.from_result("Paged search", res)
        return items

    def user_exists(self, principal: str) -> bool:
        safe_upn = escape_ldap_filter_value(principal)
        safe_sam = escape_ldap_filter_value(strip_domain(principal))
        flt = f"(&(objectClass=user)(|(userPrincipalName={safe_upn})(sAMAccountName={safe_sam})))"
        with self._service_conn() as conn:
            records = self._search(conn, flt, ["distinguishedName"], size_limit=1)
        return bool(records)

    def authenticate(self, principal: str, password: str) -> bool:
        """Bind as ``principal``.

        Rejected credentials raise `ADAuthenticationError`; anything else that
        goes wrong raises `ADError` or `ADConnectionError`.
        """
        if not password:
            # AD treats an empty password as an unauthenticated bind and accepts it.
            raise ADAuthenticationError(
                "Bind failed: empty password",
                result=49,
                description="invalidCredentials",
                message="No password provided.",
            )

        try:
            conn = self._conn(principal, password)
        except LDAPException as e:
            raise ADConnectionError(f"LDAP connection failed: {e}") from e

        try:
            if conn.bind():
                return True
            raise ADError.from_result("Bind", conn.result)
        except LDAPException as e:
            raise ADConnectionError(f"LDAP error: {e}") from e
        finally:
            try:
                conn.unbind()
            except LDAPException:
                log.debug("Unbind failed", exc_info=True)

    def get_group_users(self, group_name: str) -> list[dict[str, Any]]:
        """Return all users that are (possibly nested) members of a group."""
        safe = escape_ldap_filter_value(group_name)
        with self._service_conn() as conn:
            groups = self._search(
                conn,
                f"(&(objectClass=group)(|(cn={safe})(sAMAccountName={safe})))",
                ["distinguishedName"],
                size_limit=1,
            )
            if not groups:
                log.warning("Group %s not found", group_name)
                return []
            group_dn = escape_ldap_filter_value(groups[0]["dn"])
            return self._search(
                conn,
                f"(&(objectClass=user)(memberOf:{_IN_CHAIN}:={group_dn}))",
                ["distinguishedName", "sAMAccountName", "cn"],
            )

    def add(self, dn: str, attributes: dict[str, Any]) -> None:
        with self._service_conn() as conn:
            if not conn.add(dn, attributes=attributes):
                raise ADError.from_result(f"Add {dn}", conn.result)
        log.info("Created %s", dn)

    def replace(self, dn: str, attributes: dict[str, Any]) -> None:
        changes = {
            name: [(MODIFY_REPLACE, to_ldap_values(value))]
            for name, value in attributes.items()
        }
        with self._service_conn() as conn:
            if not conn.modify(dn, changes):
                raise ADError.from_result(f"Modify {dn}", conn.result)
        log.debug("Replaced %s on %s", ", ".join(sorted(attributes)), dn)

    def modify_dn(self, dn: str, new_dn: str) -> None:
        parts = split_dn(new_dn)
        if not parts:
            raise ADError(f"Invalid target DN: {new_dn!r}")
        relative_dn = parts[0]
        new_parent = ",".join(parts[1:])
        old_parent = ",".join(split_dn(dn)[1:])

        with self._service_conn() as conn:
            if new_parent and new_parent.lower() != old_parent.lower():
                ok = conn.modify_dn(dn, relative_dn, new_superior=new_parent)
            else:
                ok = conn.modify_dn(dn, relative_dn)
            if not ok:
                raise ADError.from_result(f"Rename {dn}", conn.result)
        log.info("Renamed %s to %s", dn, new_dn)

    def delete(self, dn: str) -> None:
        with self._service_conn() as conn:
            if not conn.delete(dn):
                raise ADError.from_result(f"Delete {dn}", conn.result)
        log.info("Deleted %s", dn)
