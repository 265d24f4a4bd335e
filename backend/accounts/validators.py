import re

from django.core.exceptions import ValidationError

PASSWORD_PATTERN = re.compile(r'^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)')
PHONE_PATTERN = re.compile(r'^\+?[0-9]{10,15}$')
_LOCAL_PART = r'[a-zA-Z0-9._%+-]+'


def is_campus_email(email, domains):
    """True when ``email`` belongs to one of the allow-listed domains."""
    if not domains:
        return False
    pattern = r'^{}@({})$'.format(_LOCAL_PART, '|'.join(re.escape(d) for d in domains))
    return re.match(pattern, email or '', re.IGNORECASE) is not None


def validate_password_strength(value):
    if len(value) < 6:
        raise ValidationError("Password must be at least 6 characters")
    if not PASSWORD_PATTERN.match(value):
        raise ValidationError(
            "Password must contain at least one uppercase letter, one lowercase letter, and one number"
        )


def validate_phone_number(value):
    if value and not PHONE_PATTERN.match(value):
        raise ValidationError("Invalid phone number format")
