"""Active Directory user lifecycle helpers with a per-user lookup cache."""

from .ad import ADClient, ADConfig
from .factory import create_user_service
from .services import UserService

__all__ = ["ADClient", "ADConfig", "UserService", "create_user_service"]
