"""
Session token helpers.

A session is a simplejwt access token that lives for the configured
session lifetime (30 days). It travels as an HTTP-only cookie and is also
returned in the response body for clients that prefer the Authorization
header.
"""

from datetime import timedelta

from rest_framework_simplejwt.tokens import AccessToken

from common.config import get_config

LOGGED_OUT_VALUE = 'none'


def issue_session_token(user) -> str:
    token = AccessToken.for_user(user)
    token.set_exp(lifetime=get_config().session_lifetime)
    return str(token)


def set_session_cookie(response, token):
    config = get_config()
    response.set_cookie(
        config.session_cookie_name,
        token,
        max_age=int(config.session_lifetime.total_seconds()),
        httponly=True,
        secure=config.session_cookie_secure,
        samesite=config.session_cookie_samesite,
    )
    return response


def expire_session_cookie(response):
    """Replace the session cookie with a placeholder that expires in seconds."""
    config = get_config()
    response.set_cookie(
        config.session_cookie_name,
        LOGGED_OUT_VALUE,
        max_age=int(timedelta(seconds=10).total_seconds()),
        httponly=True,
        secure=config.session_cookie_secure,
        samesite=config.session_cookie_samesite,
    )
    return response
