"""Account management service."""

import logging

from django.db import transaction, IntegrityError
from django.contrib.auth import get_user_model

from apps.core.validation import validate_username, validate_phone, validate_password
from .exceptions import (
    DuplicateUserError,
    InvalidProfileError,
    PasswordConfirmationError,
)
from .user_registration import ensure_identity_available

User = get_user_model()

logger = logging.getLogger(__name__)


def update_profile(*, user: User, username=None, phone=None) -> User:
    """
    Change a user's username and/or phone number.

    Uniqueness is re-checked against every other account before saving.

    Raises:
        InvalidProfileError: If no field is given or a field is malformed
        DuplicateUserError: If the new username or phone belongs to someone else
    """
    if not username and not phone:
        raise InvalidProfileError("No valid fields to update")

    errors = []
    if username:
        errors += validate_username(username).errors
    if phone:
        errors += validate_phone(phone).errors
    if errors:
        raise InvalidProfileError("Invalid profile data", errors=errors)

    ensure_identity_available(username=username, phone=phone, exclude_user_id=user.id)

    update_fields = ['updated_at']
    try:
        with transaction.atomic():
            if username:
                user.username = User.objects.normalize_username(username)
                update_fields.append('username')
            if phone:
                user.phone = phone.strip()
                update_fields.append('phone')
            user.save(update_fields=update_fields)
    except IntegrityError:
        # Drop the rejected values from the in-memory instance
        user.refresh_from_db()
        raise DuplicateUserError("Username or phone already exists")

    logger.info("Updated profile for user %s", user.id)
    return user


@transaction.atomic
def change_password(*, user: User, current_password: str, new_password: str) -> None:
    """
    Replace the user's password after checking the current one.

    Raises:
        InvalidProfileError: If the new password is malformed
        PasswordConfirmationError: If current password is incorrect
    """
    if not current_password or not new_password:
        raise InvalidProfileError("Current password and new password are required")

    errors = validate_password(new_password).errors
    if errors:
        raise InvalidProfileError("Invalid new password", errors=errors)

    if not user.check_password(current_password):
        raise PasswordConfirmationError("Current password is incorrect")

    user.set_password(new_password)
    user.save(update_fields=['password', 'updated_at'])
