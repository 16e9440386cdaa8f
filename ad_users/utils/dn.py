from __future__ import annotations

import re

from ldap3.utils.dn import escape_rdn

DEFAULT_LOCATION = "CN=Users,"

_DC_RE = re.compile(r"\bdc=", re.IGNORECASE)
_HEX_PAIR = re.compile(r"[0-9a-fA-F]{2}")


def split_dn(dn: str) -> list[str]:
    """Split a DN into its RDNs, honouring backslash escapes.

    Escapes are kept as-is so the parts can be joined back into a valid DN.
    """
    parts: list[str] = []
    cur: list[str] = []
    esc = False
    for ch in dn or "":
        if esc:
            cur.append(ch)
            esc = False
            continue
        if ch == "\\":
            cur.append(ch)
            esc = True
            continue
        if ch == ",":
            parts.append("".join(cur).strip())
            cur = []
            continue
        cur.append(ch)
    parts.append("".join(cur).strip())
    return [p for p in parts if p]


def rdn_type(rdn: str) -> str:
    """Attribute type of an RDN, upper-cased (``ou=Sales`` -> ``OU``)."""
    if "=" not in rdn:
        return ""
    return rdn.split("=", 1)[0].strip().upper()


def rdn_value(rdn: str) -> str:
    if "=" not in rdn:
        return rdn.strip()
    return rdn.split("=", 1)[1].strip()


def unescape_dn_value(value: str) -> str:
    r"""Undo DN escaping in an attribute value (``R\,D`` -> ``R,D``).

    Handles both ``\<char>`` and ``\<hex><hex>`` forms; hex escapes are
    UTF-8 bytes.
    """
    out = bytearray()
    i = 0
    while i < len(value):
        ch = value[i]
        if ch == "\\" and i + 1 < len(value):
            pair = value[i + 1:i + 3]
            if _HEX_PAIR.fullmatch(pair):
                out.append(int(pair, 16))
                i += 3
                continue
            out.extend(value[i + 1].encode("utf-8"))
            i += 2
            continue
        out.extend(ch.encode("utf-8"))
        i += 1
    return out.decode("utf-8", errors="replace")


def upper_dc(base_dn: str) -> str:
    """Case-normalize ``dc=`` labels to ``DC=``."""
    return _DC_RE.sub("DC=", base_dn or "")


def normalize_location(location: str | None) -> str:
    """Return a DN fragment that always ends with a comma.

    Empty input maps to the default ``CN=Users,`` container.
    """
    if not location or not location.strip():
        return DEFAULT_LOCATION
    location = location.strip()
    if not location.endswith(","):
        location = f"{location},"
    return location


def parse_location(location: str | None) -> str:
    """Turn a human location into a normalized DN fragment.

    Accepts a root-to-leaf path (``EMEA/Sales``, containers written as
    ``!Users``) or a DN fragment (``OU=Sales,OU=EMEA``).
    """
    loc = (location or "").strip()
    if not loc or "=" in loc:
        return normalize_location(loc)

    parts = [p.strip() for p in loc.split("/") if p.strip()]
    rdns: list[str] = []
    for part in reversed(parts):
        if part.startswith("!"):
            rdns.append(f"CN={escape_rdn(part[1:])}")
        else:
            rdns.append(f"OU={escape_rdn(part)}")
    return normalize_location(",".join(rdns))


def location_from_dn(dn: str) -> str:
    """Render the container path of an object DN.

    ``CN=Jane,OU=Sales,OU=EMEA,DC=corp,DC=com`` -> ``EMEA/Sales``. The leaf
    is dropped, the base DN is cut off and ``CN`` containers get a ``!``.
    """
    kept: list[str] = []
    for rdn in split_dn(dn):
        if rdn_type(rdn) == "DC":
            break
        kept.append(rdn)

    rendered: list[str] = []
    for rdn in reversed(kept[1:]):
        kind = rdn_type(rdn)
        if kind == "OU":
            rendered.append(unescape_dn_value(rdn_value(rdn)))
        elif kind == "CN":
            rendered.append(f"!{unescape_dn_value(rdn_value(rdn))}")
        else:
            rendered.append(rdn)
    return "/".join(rendered)


def rename_leaf(dn: str, cn: str) -> str:
    """Replace the leaf RDN of ``dn`` with ``CN=<cn>``."""
    parts = split_dn(dn)
    return ",".join([f"CN={escape_rdn(cn)}", *parts[1:]])
