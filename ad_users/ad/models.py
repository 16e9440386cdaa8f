from __future__ import annotations

from dataclasses import dataclass

from ..ad_utils import domain_to_base_dn


@dataclass
class ADConfig:
    host: str
    domain: str
    port: int = 389
    use_ssl: bool = False
    starttls: bool = True
    bind_username: str = ""
    bind_password: str = ""
    tls_validate: bool = False
    ca_file: str = ""
    connect_timeout: float = 5.0
    base_dn_override: str = ""

    @property
    def base_dn(self) -> str:
        override = (self.base_dn_override or "").strip()
        if override:
            return override
        return domain_to_base_dn(self.domain)

    @property
    def bind_principal(self) -> str:
        u = (self.bind_username or "").strip()
        d = (self.domain or "").strip().strip(".")
        if not u:
            return ""
        # Already a UPN or a full DN.
        if "@" in u or "=" in u:
            return u
        return f"{u}@{d}" if d else u

    def principal(self, username: str) -> str:
        """Build ``user@domain`` from a bare username."""
        d = (self.domain or "").strip().strip(".")
        return f"{username}@{d}" if d else username
