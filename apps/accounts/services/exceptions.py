"""Domain-specific exceptions for accounts services."""


class AccountsServiceError(Exception):
    """Base exception for accounts services."""
    pass


class UserRegistrationError(AccountsServiceError):
    """Raised when sign-up input is invalid."""

    def __init__(self, message, errors=None):
        super().__init__(message)
        self.errors = errors or []


class DuplicateUserError(AccountsServiceError):
    """Raised when the username or phone number is already taken."""
    pass


class InvalidCredentialsError(AccountsServiceError):
    """Raised when authentication credentials are invalid."""
    pass


class InactiveAccountError(AccountsServiceError):
    """Raised when account is deactivated."""
    pass


class UserNotFoundError(AccountsServiceError):
    """Raised when user does not exist."""
    pass


class InvalidProfileError(AccountsServiceError):
    """Raised when a profile update carries invalid or no fields."""

    def __init__(self, message, errors=None):
        super().__init__(message)
        self.errors = errors or []


class PasswordConfirmationError(AccountsServiceError):
    """Raised when the current password does not match."""
    pass
