# users/views.py
import logging

from django.conf import settings
from django.http import Http404, HttpResponseRedirect
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from authx.tokens import issue_tokens, set_refresh_cookie
from core.generics import api_error
from core.media import MediaUploadError, replace_image
from core.throttles import AUTH_THROTTLES

from . import oauth
from .roles import RoleTransitionError, upgrade_to_organizer
from .serializers import UpdateProfileSerializer, UserSerializer, UserSummarySerializer

logger = logging.getLogger("spot.auth")


class ProfileView(APIView):
    """
    GET /api/users/profile/
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return Response({"user": UserSerializer(request.user, context={"request": request}).data})


class UpdateProfileView(APIView):
    """
    PUT /api/users/update/

    name/email/interests/location plus an optional profileImage file.
    A new image is uploaded before the old one is removed.
    """
    permission_classes = [IsAuthenticated]

    def put(self, request):
        user = request.user
        serializer = UpdateProfileSerializer(user, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        new_image = serializer.validated_data.get("profileImage")
        if new_image is not None:
            try:
                user.profile_image = replace_image(user.profile_image, new_image, "profiles")
            except MediaUploadError:
                return api_error("Failed to upload profile image", status.HTTP_500_INTERNAL_SERVER_ERROR)

        user = serializer.save()
        return Response({"user": UserSerializer(user, context={"request": request}).data})


class UpgradeRoleView(APIView):
    """
    PATCH /api/users/upgrade-role/

    user -> organizer. The session is re-issued so the new access
    token carries the new role.
    """
    permission_classes = [IsAuthenticated]

    def patch(self, request):
        try:
            user = upgrade_to_organizer(request.user)
        except RoleTransitionError as exc:
            return api_error(exc.message, exc.status_code)

        logger.info("User %s upgraded to organizer", user.pk)
        access, refresh = issue_tokens(user)
        response = Response(
            {
                "message": "Role upgraded to organizer",
                "accessToken": access,
                "user": UserSummarySerializer(user).data,
            }
        )
        return set_refresh_cookie(response, refresh)


class OAuthStartView(APIView):
    """
    GET /api/users/auth/<provider>/?role=user|organizer

    Redirects to the provider; the requested role travels in `state`.
    """
    permission_classes = [AllowAny]
    authentication_classes = []
    throttle_classes = AUTH_THROTTLES

    def get(self, request, provider):
        if provider not in oauth.PROVIDERS:
            raise Http404
        return HttpResponseRedirect(
            oauth.authorization_url(provider, request.query_params.get("role"))
        )


class OAuthCallbackView(APIView):
    """
    GET /api/users/auth/<provider>/callback/

    On success: refresh token in the cookie, access token in the
    redirect's query string (FRONTEND_URL?accessToken=...).
    """
    permission_classes = [AllowAny]
    authentication_classes = []
    throttle_classes = AUTH_THROTTLES

    def _fail(self, reason):
        return HttpResponseRedirect(f"{settings.FRONTEND_URL.rstrip('/')}/login?error={reason}")

    def get(self, request, provider):
        if provider not in oauth.PROVIDERS:
            raise Http404

        code = request.query_params.get("code")
        if not code or request.query_params.get("error"):
            return self._fail("auth_failed")

        try:
            identity = oauth.fetch_identity(provider, code)
        except (oauth.OAuthError, ValueError) as exc:
            logger.warning("%s sign-in rejected: %s", provider, exc)
            return self._fail("auth_failed")
        except Exception:
            logger.exception("%s sign-in failed", provider)
            return self._fail("server_error")

        try:
            user = oauth.resolve_user(identity, request.query_params.get("state"))
            access, refresh = issue_tokens(user)
        except Exception:
            logger.exception("Could not sign in %s user %s", provider, identity.email)
            return self._fail("server_error")

        response = HttpResponseRedirect(f"{settings.FRONTEND_URL}?accessToken={access}")
        return set_refresh_cookie(response, refresh)
