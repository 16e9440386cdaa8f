"""Active Directory (LDAP) client package.

Public API:
    - ADConfig
    - ADClient
    - ADError and its subclasses
"""

from .client import ADClient
from .exceptions import (
    ADAuthenticationError,
    ADConnectionError,
    ADEntryExistsError,
    ADError,
)
from .models import ADConfig

__all__ = [
    "ADAuthenticationError",
    "ADClient",
    "ADConfig",
    "ADConnectionError",
    "ADEntryExistsError",
    "ADError",
]
