from rest_framework_simplejwt.authentication import JWTAuthentication

from common.config import get_config

from .tokens import LOGGED_OUT_VALUE


class CookieJWTAuthentication(JWTAuthentication):
    """
    Resolve the session token from the HTTP-only cookie first, then from
    ``Authorization: Bearer <token>``.

    The user row is re-fetched on every request, so a deleted or
    deactivated account is refused even while its token is unexpired.
    """

    def authenticate(self, request):
        raw_token = request.COOKIES.get(get_config().session_cookie_name)

        if not raw_token or raw_token == LOGGED_OUT_VALUE:
            header = self.get_header(request)
            if header is None:
                return None
            raw_token = self.get_raw_token(header)
            if raw_token is None:
                return None

        validated_token = self.get_validated_token(raw_token)
        return self.get_user(validated_token), validated_token
