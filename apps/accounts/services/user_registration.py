"""User registration service."""

import logging

from django.db import transaction, IntegrityError
from django.contrib.auth import get_user_model

from apps.core.validation import validate_username, validate_phone, validate_password
from .exceptions import UserRegistrationError, DuplicateUserError

User = get_user_model()

logger = logging.getLogger(__name__)


def ensure_identity_available(*, username=None, phone=None, exclude_user_id=None) -> None:
    """
    Raise DuplicateUserError if another account already uses the username or phone.

    Username comparison is case-insensitive because usernames are stored
    lower-cased.
    """
    taken = User.objects.all()
    if exclude_user_id is not None:
        taken = taken.exclude(id=exclude_user_id)

    if username and taken.filter(username=username.strip().lower()).exists():
        raise DuplicateUserError("Username taken")
    if phone and taken.filter(phone=phone.strip()).exists():
        raise DuplicateUserError("Phone number already registered")


def register_user(*, username: str, phone: str, password: str) -> User:
    """
    Register a new user.

    Args:
        username: 3-30 characters, letters, digits and underscores
        phone: Exactly 10 digits
        password: 6-128 characters (will be hashed)

    Returns:
        Created User instance

    Raises:
        UserRegistrationError: If any field fails validation (all reasons listed)
        DuplicateUserError: If username or phone is already registered
    """
    errors = (
        validate_username(username).errors
        + validate_phone(phone).errors
        + validate_password(password).errors
    )
    if errors:
        raise UserRegistrationError("Invalid registration data", errors=errors)

    ensure_identity_available(username=username, phone=phone)

    try:
        with transaction.atomic():
            user = User.objects.create_user(
                username=username,
                phone=phone,
                password=password,
            )
    except IntegrityError:
        # Lost a race against a concurrent sign-up with the same identity
        logger.warning("Concurrent sign-up conflict for username=%s", username)
        raise DuplicateUserError("Username or phone number already exists")

    logger.info("Registered user %s", user.id)
    return user
