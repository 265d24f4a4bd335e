"""
Account operations: registration, login and password reset.

Views validate the request shape with serializers and then call into this
module, which owns the duplicate checks, credential comparison and the
reset-token bookkeeping.
"""

import hashlib
import logging
import secrets

from django.contrib.auth import authenticate, get_user_model
from django.core.mail import send_mail
from django.db import IntegrityError, transaction
from django.db.models import Q
from django.utils import timezone

from common.config import get_config
from .exceptions import (
    AccountNotFoundError,
    DuplicateAccountError,
    InvalidCredentialsError,
    InvalidResetTokenError,
    ResetEmailError,
)

User = get_user_model()
logger = logging.getLogger(__name__)


def hash_reset_token(raw_token: str) -> str:
    return hashlib.sha256(raw_token.encode()).hexdigest()


def register_user(name, email, password, college_id, phone_number=""):
    """
    Create a student account.

    Raises:
        DuplicateAccountError: if the email (or the phone number, when one
            is given) already belongs to an account.
    """
    email = email.lower().strip()
    phone_number = (phone_number or "").strip()

    lookup = Q(email=email)
    if phone_number:
        lookup |= Q(phone_number=phone_number)
    existing = User.objects.filter(lookup).first()
    if existing:
        raise DuplicateAccountError('email' if existing.email == email else 'phone number')

    try:
        with transaction.atomic():
            user = User.objects.create_user(
                email=email,
                password=password,
                name=name.strip(),
                college_id=college_id.strip(),
                phone_number=phone_number,
            )
    except IntegrityError:
        # Lost a race with a concurrent registration of the same email
        raise DuplicateAccountError('email')

    logger.info("Registered user %s", user.id)
    return user


def login_user(request, email, password):
    """Return the active user matching the credentials or raise."""
    user = authenticate(request, email=email.lower().strip(), password=password)
    if user is None:
        raise InvalidCredentialsError()
    return user


def request_password_reset(email):
    """
    Store a hashed one-time token and email the raw token to the user.

    Only the sha256 digest is persisted. When the email cannot be sent the
    stored digest is cleared again so no undeliverable token stays valid.

    Returns:
        The user the email was sent to.
    """
    config = get_config()
    try:
        user = User.objects.get(email=email.lower().strip())
    except User.DoesNotExist:
        raise AccountNotFoundError()

    raw_token = secrets.token_hex(20)
    user.reset_password_token = hash_reset_token(raw_token)
    user.reset_password_expire = timezone.now() + config.reset_token_ttl
    user.save(update_fields=['reset_password_token', 'reset_password_expire'])

    reset_url = f"{config.frontend_url}/reset-password/{raw_token}"
    minutes = int(config.reset_token_ttl.total_seconds() // 60)
    html_message = (
        "<h1>Password Reset Request</h1>"
        "<p>You have requested a password reset for your CampusCruz account.</p>"
        "<p>Please click the link below to reset your password:</p>"
        f'<a href="{reset_url}">{reset_url}</a>'
        f"<p>This link will expire in {minutes} minutes.</p>"
        "<p>If you did not request this, please ignore this email.</p>"
    )

    try:
        send_mail(
            subject="Password Reset Request",
            message=f"Reset your password: {reset_url} (expires in {minutes} minutes)",
            from_email=None,
            recipient_list=[user.email],
            html_message=html_message,
        )
    except Exception:
        logger.exception("Failed to send password reset email to user %s", user.id)
        user.reset_password_token = ''
        user.reset_password_expire = None
        user.save(update_fields=['reset_password_token', 'reset_password_expire'])
        raise ResetEmailError()

    return user


@transaction.atomic
def reset_password(raw_token, new_password):
    """
    Redeem a reset token: rotate the password and clear the stored digest.

    Raises:
        InvalidResetTokenError: unknown, already used or expired token.
    """
    user = (
        User.objects.select_for_update()
        .filter(
            reset_password_token=hash_reset_token(raw_token),
            reset_password_expire__gt=timezone.now(),
        )
        .first()
    )
    if user is None:
        raise InvalidResetTokenError()

    user.set_password(new_password)
    user.reset_password_token = ''
    user.reset_password_expire = None
    user.save(update_fields=['password', 'reset_password_token', 'reset_password_expire'])
    logger.info("Password reset for user %s", user.id)
    return user
