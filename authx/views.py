# authx/views.py
"""
Signup (with emailed OTP), login, session refresh/logout and password reset.

All of these are public endpoints with the stricter "auth" throttle.
Explicit failures answer {"message": ...}; anything unexpected is logged
and answered with a generic 500.
"""
import logging

from django.conf import settings
from django.contrib.auth.hashers import make_password
from django.db import IntegrityError, transaction
from django.utils import timezone
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from core.generics import api_error
from core.media import upload_image
from core.throttles import AUTH_THROTTLES
from users.models import OneTimePassword, PendingUser, User
from users.serializers import UserSummarySerializer

from .emails import send_otp_email
from .otp import (
    clear_otps,
    consume_otp,
    issue_otp,
    latest_otp,
    live_pending_user,
    otp_matches,
)
from .serializers import (
    ForgotPasswordSerializer,
    LoginSerializer,
    RegisterSerializer,
    ResendOTPSerializer,
    ResetPasswordSerializer,
    VerifyOTPSerializer,
)
from .tokens import (
    access_token_for,
    clear_refresh_cookie,
    issue_tokens,
    revoke_refresh_token,
    set_refresh_cookie,
    user_for_refresh_token,
    user_from_bearer,
)

logger = logging.getLogger("spot.auth")

SIGNUP = OneTimePassword.PURPOSE_SIGNUP
FORGOT_PASSWORD = OneTimePassword.PURPOSE_FORGOT_PASSWORD

SERVER_ERROR = "Server error"
OTP_MISSING = "OTP expired or not found"


def _session_response(user, payload, status_code=status.HTTP_200_OK):
    """
    Issue a fresh token pair: access token in the body,
    refresh token in the HttpOnly cookie.
    """
    access, refresh = issue_tokens(user)
    body = {**payload, "accessToken": access, "user": UserSummarySerializer(user).data}
    response = Response(body, status=status_code)
    return set_refresh_cookie(response, refresh)


class PublicAuthView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []
    throttle_classes = AUTH_THROTTLES


class RegisterView(PublicAuthView):
    """
    POST /api/users/register/

    Stages the signup in PendingUser and mails a 6-digit code.
    The real account only exists once /verify-otp/ succeeds.
    """

    def post(self, request):
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        email = data["email"]

        if User.objects.filter(email__iexact=email).exists():
            return api_error("User already exists")
        if User.objects.filter(name=data["name"]).exists():
            return api_error("Name is already taken")

        try:
            profile_image = None
            if data.get("profileImage"):
                profile_image = upload_image(data["profileImage"], "profiles")

            with transaction.atomic():
                PendingUser.objects.update_or_create(
                    email=email,
                    defaults={
                        "name": data["name"],
                        "password": make_password(data["password"]),
                        "role": data["role"],
                        "interests": data.get("interests") or [],
                        "profile_image": profile_image,
                        "created_at": timezone.now(),
                    },
                )
                code = issue_otp(email, SIGNUP)

            send_otp_email(email, code, SIGNUP)
        except Exception:
            logger.exception("Registration failed for %s", email)
            return api_error(SERVER_ERROR, status.HTTP_500_INTERNAL_SERVER_ERROR)

        return Response({"message": "OTP sent to your email"}, status=status.HTTP_200_OK)


class VerifyOTPView(PublicAuthView):
    """
    POST /api/users/verify-otp/

    Promotes the PendingUser to a real User and starts a session.
    """

    def post(self, request):
        serializer = VerifyOTPSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        email = serializer.validated_data["email"]

        otp = latest_otp(email, SIGNUP)
        if otp is None:
            return api_error(OTP_MISSING)
        if not otp_matches(otp, serializer.validated_data["otp"]):
            return api_error("Invalid OTP")

        pending = live_pending_user(email)
        if pending is None:
            return api_error("Signup session expired. Please register again")

        if User.objects.filter(email__iexact=email).exists():
            clear_otps(email, SIGNUP)
            PendingUser.objects.filter(email=email).delete()
            return api_error("User already exists")

        # Two verifications racing on the same code: only one deletes the row
        if not consume_otp(otp):
            return api_error(OTP_MISSING)

        try:
            with transaction.atomic():
                user = User.objects.create_from_pending(pending)
                PendingUser.objects.filter(pk=pending.pk).delete()
                clear_otps(email, SIGNUP)
        except IntegrityError:
            logger.warning("Signup for %s collided with an existing account", email)
            PendingUser.objects.filter(email=email).delete()
            return api_error("User already exists")

        logger.info("User %s verified email and signed up", user.pk)
        return _session_response(
            user,
            {"message": "Email verified successfully"},
            status_code=status.HTTP_201_CREATED,
        )


class ResendOTPView(PublicAuthView):
    """
    POST /api/users/resend-otp/

    purpose=signup needs a live pending signup.
    purpose=forgot-password answers the same way whether or not the
    account exists.
    """

    def post(self, request):
        serializer = ResendOTPSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        email = serializer.validated_data["email"]
        purpose = serializer.validated_data["purpose"]

        try:
            if purpose == SIGNUP:
                pending = live_pending_user(email)
                if pending is None:
                    return api_error("Signup session expired. Please register again")
                # A new code restarts the signup window too
                PendingUser.objects.filter(pk=pending.pk).update(created_at=timezone.now())
                send_otp_email(email, issue_otp(email, SIGNUP), SIGNUP)
            else:
                user = User.objects.filter(email__iexact=email).first()
                if user is not None and user.has_usable_password():
                    send_otp_email(email, issue_otp(email, FORGOT_PASSWORD), FORGOT_PASSWORD)
        except Exception:
            logger.exception("Could not resend %s OTP to %s", purpose, email)
            return api_error(SERVER_ERROR, status.HTTP_500_INTERNAL_SERVER_ERROR)

        return Response({"message": "OTP resent to your email"})


class LoginView(PublicAuthView):
    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        email = serializer.validated_data["email"]

        user = User.objects.filter(email__iexact=email).first()
        # Same answer for unknown email and wrong password
        if (
            user is None
            or not user.is_active
            or not user.check_password(serializer.validated_data["password"])
        ):
            return api_error("Invalid credentials")

        logger.info("User %s logged in", user.pk)
        return _session_response(user, {"message": "Logged in successfully"})


class LogoutView(PublicAuthView):
    """
    POST /api/users/logout/

    Works with or without a bearer token: the stored refresh token is
    cleared by user and/or by the cookie value. An expired access token
    must not block logout, so it is resolved here instead of by the
    authentication classes.
    """

    def post(self, request):
        revoke_refresh_token(
            user=user_from_bearer(request),
            raw_token=request.COOKIES.get(settings.REFRESH_COOKIE_NAME),
        )
        response = Response({"message": "Logged out successfully"})
        return clear_refresh_cookie(response)


class RefreshTokenView(PublicAuthView):
    """
    POST /api/users/refresh/

    Exchanges the refresh cookie for a new access token.
    The refresh token itself is not rotated.
    """

    def post(self, request):
        user = user_for_refresh_token(request.COOKIES.get(settings.REFRESH_COOKIE_NAME))
        if user is None:
            return api_error("Unauthorized", status.HTTP_401_UNAUTHORIZED)
        return Response({"accessToken": access_token_for(user)})


class ForgotPasswordView(PublicAuthView):
    GENERIC_MESSAGE = "If an account exists for this email, an OTP has been sent"

    def post(self, request):
        serializer = ForgotPasswordSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        email = serializer.validated_data["email"]

        user = User.objects.filter(email__iexact=email).first()
        if user is None:
            return Response({"message": self.GENERIC_MESSAGE})

        if not user.has_usable_password():
            return api_error("This account uses social login")

        try:
            send_otp_email(user.email, issue_otp(user.email, FORGOT_PASSWORD), FORGOT_PASSWORD)
        except Exception:
            logger.exception("Could not send password reset OTP to %s", email)
            return api_error(SERVER_ERROR, status.HTTP_500_INTERNAL_SERVER_ERROR)

        return Response({"message": self.GENERIC_MESSAGE})


class ResetPasswordView(PublicAuthView):
    def post(self, request):
        serializer = ResetPasswordSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        email = data["email"]

        otp = latest_otp(email, FORGOT_PASSWORD)
        if otp is None:
            return api_error(OTP_MISSING)
        if not otp_matches(otp, data["otp"]):
            return api_error("Invalid OTP")

        user = User.objects.filter(email__iexact=email).first()
        if user is None or not consume_otp(otp):
            return api_error(OTP_MISSING)

        user.set_password(data["newPassword"])
        # Existing sessions must log in again
        user.refresh_token = None
        user.save(update_fields=["password", "refresh_token"])
        clear_otps(email, FORGOT_PASSWORD)

        logger.info("User %s reset their password", user.pk)
        return Response({"message": "Password reset successfully"})
