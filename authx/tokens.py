# authx/tokens.py
from django.conf import settings
from rest_framework.exceptions import AuthenticationFailed
from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.settings import api_settings
from rest_framework_simplejwt.tokens import RefreshToken

from users.models import User


def issue_tokens(user):
    """
    Mint an access/refresh pair and store the refresh token on the user.

    Only one refresh token is kept per user, so a new login signs the
    previous session out.
    """
    refresh = RefreshToken.for_user(user)
    refresh["role"] = user.role

    user.refresh_token = str(refresh)
    User.objects.filter(pk=user.pk).update(refresh_token=user.refresh_token)

    return str(refresh.access_token), user.refresh_token


def user_for_refresh_token(raw_token):
    """
    Resolve the owner of a refresh token.

    The token must be valid (signature + expiry) AND still be the one stored
    on the user; a replaced or revoked token resolves to None.
    """
    if not raw_token:
        return None
    try:
        token = RefreshToken(raw_token)
    except TokenError:
        return None

    user_id = token.get(api_settings.USER_ID_CLAIM)
    return User.objects.filter(pk=user_id, refresh_token=raw_token, is_active=True).first()


def access_token_for(user) -> str:
    refresh = RefreshToken.for_user(user)
    refresh["role"] = user.role
    return str(refresh.access_token)


def user_from_bearer(request):
    """Best-effort bearer lookup; an expired or bad access token yields None."""
    try:
        result = JWTAuthentication().authenticate(request)
    except AuthenticationFailed:
        return None
    return result[0] if result else None


def revoke_refresh_token(user=None, raw_token=None) -> None:
    if user is not None and getattr(user, "is_authenticated", False):
        User.objects.filter(pk=user.pk).update(refresh_token=None)
    if raw_token:
        User.objects.filter(refresh_token=raw_token).update(refresh_token=None)


def _cookie_options():
    if settings.IS_PRODUCTION:
        return {"secure": True, "samesite": "None"}
    return {"secure": False, "samesite": "Lax"}


def set_refresh_cookie(response, token):
    lifetime = api_settings.REFRESH_TOKEN_LIFETIME
    response.set_cookie(
        settings.REFRESH_COOKIE_NAME,
        token,
        max_age=int(lifetime.total_seconds()),
        httponly=True,
        **_cookie_options(),
    )
    return response


def clear_refresh_cookie(response):
    # Same attributes as set_refresh_cookie, or browsers keep the cookie
    response.delete_cookie(
        settings.REFRESH_COOKIE_NAME,
        samesite=_cookie_options()["samesite"],
    )
    return response
