from __future__ import annotations

from typing import Any


def escape_ldap_filter_value(value: str) -> str:
    """RFC 4515 escaping for LDAP filter values."""
    out: list[str] = []
    for ch in value:
        if ch == "\\":
            out.append("\\5c")
        elif ch == "*":
            out.append("\\2a")
        elif ch == "(":
            out.append("\\28")
        elif ch == ")":
            out.append("\\29")
        elif ch == "\x00":
            out.append("\\00")
        else:
            out.append(ch)
    return "".join(out)


def flatten_attributes(attributes: dict[str, Any]) -> dict[str, Any]:
    """Collapse single-element value lists to the bare value.

    Empty lists are dropped, multi-valued attributes stay lists.
    """
    out: dict[str, Any] = {}
    for name, value in (attributes or {}).items():
        if isinstance(value, (list, tuple)):
            if not value:
                continue
            out[name] = value[0] if len(value) == 1 else list(value)
        else:
            out[name] = value
    return out


def entry_to_record(entry: dict[str, Any]) -> dict[str, Any] | None:
    """Turn an ldap3 response entry into a plain user record with a ``dn`` key."""
    if entry.get("type") != "searchResEntry":
        return None
    record = flatten_attributes(dict(entry.get("attributes") or {}))
    dn = str(record.get("distinguishedName") or entry.get("dn") or "")
    if not dn:
        return None
    record["dn"] = dn
    return record


def to_ldap_values(value: Any) -> list[Any]:
    """Wrap a replace value into the list ldap3 expects for MODIFY_REPLACE."""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [_scalar(v) for v in value]
    return [_scalar(value)]


def _scalar(value: Any) -> Any:
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, int):
        return str(value)
    return value
