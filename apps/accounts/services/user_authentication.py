"""User authentication service."""

from django.db import transaction
from django.contrib.auth import get_user_model

from apps.core.clock import system_clock
from .exceptions import InvalidCredentialsError, InactiveAccountError

User = get_user_model()


@transaction.atomic
def authenticate_user(*, identifier: str, password: str, clock=system_clock) -> User:
    """
    Authenticate user with username or phone number and password.

    Uses select_for_update() to prevent race conditions when updating last_login.

    Args:
        identifier: Username (any case) or 10-digit phone number
        password: User's password
        clock: Source of the login timestamp

    Returns:
        Authenticated User instance

    Raises:
        InvalidCredentialsError: If credentials are invalid
        InactiveAccountError: If account is deactivated
    """
    identifier = (identifier or "").strip()
    users = User.objects.select_for_update()

    # Usernames take precedence over phone numbers that look alike
    user = (
        users.filter(username=identifier.lower()).first()
        or users.filter(phone=identifier).first()
    )
    if user is None:
        raise InvalidCredentialsError("Invalid credentials")

    if not user.check_password(password):
        raise InvalidCredentialsError("Invalid credentials")

    if not user.is_active:
        raise InactiveAccountError("Account is deactivated")

    user.last_login = clock.now()
    user.save(update_fields=['last_login'])

    return user
