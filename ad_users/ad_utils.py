from __future__ import annotations


def domain_to_base_dn(domain: str) -> str:
    domain = (domain or "").strip().strip(".")
    if not domain or "." not in domain:
        return ""
    parts = [p for p in domain.split(".") if p]
    return ",".join([f"DC={p}" for p in parts])


def strip_domain(username: str) -> str:
    """Return the local part of ``user@domain`` (or the name unchanged)."""
    name = str(username or "").strip()
    if "@" in name:
        return name.split("@", 1)[0]
    return name
