"""Services for accounts business logic."""

from .exceptions import (
    AccountsServiceError,
    UserRegistrationError,
    DuplicateUserError,
    InvalidCredentialsError,
    InactiveAccountError,
    UserNotFoundError,
    InvalidProfileError,
    PasswordConfirmationError,
)
from .user_registration import register_user, ensure_identity_available
from .user_authentication import authenticate_user
from .account_management import update_profile, change_password

__all__ = [
    # Exceptions
    'AccountsServiceError',
    'UserRegistrationError',
    'DuplicateUserError',
    'InvalidCredentialsError',
    'InactiveAccountError',
    'UserNotFoundError',
    'InvalidProfileError',
    'PasswordConfirmationError',
    # Services
    'register_user',
    'ensure_identity_available',
    'authenticate_user',
    'update_profile',
    'change_password',
]
