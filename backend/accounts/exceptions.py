"""Custom exceptions for registration, login and password reset."""

from common.exceptions import BusinessRuleViolation, Conflict, NotFound, ServiceError, Unauthenticated


class DuplicateAccountError(Conflict):
    """Raised when the email or phone number is already registered."""

    def __init__(self, duplicate_type):
        super().__init__(
            f"An account with this {duplicate_type} already exists. Please login instead.",
            suggestLogin=True,
            duplicateType=duplicate_type,
        )


class DuplicatePhoneError(Conflict):
    """Raised when a profile update reuses another account's phone number."""
    default_message = "This phone number is already in use by another account"


class InvalidCredentialsError(Unauthenticated):
    """Raised when email/password do not match an active account."""
    default_message = "Invalid credentials"


class AccountNotFoundError(NotFound):
    """Raised when no account exists for the given email."""
    default_message = "No account found with that email address"


class InvalidResetTokenError(BusinessRuleViolation):
    """Raised when a reset token is unknown, already used or expired."""
    default_message = "Invalid or expired reset token"


class ResetEmailError(ServiceError):
    """Raised when the password reset email could not be delivered."""
    default_message = "Email could not be sent"
