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
from .users import CreatedUser, UserService

__all__ = [
    "AuthResult",
    "CreatedUser",
    "InvalidUserError",
    "UserCache",
    "UserCreationError",
    "UserError",
    "UserExistsError",
    "UserNotFoundError",
    "UserRemovalError",
    "UserService",
]
