# authx/otp.py
"""
One-time codes for signup and password reset.

Codes are stored hashed with Django's password hashers and compared with
check_password(), never by equality. Only the newest unexpired code for an
(email, purpose) pair is ever considered.
"""
import logging
import secrets

from django.conf import settings
from django.contrib.auth.hashers import check_password, make_password
from django.utils import timezone

from users.models import OneTimePassword, PendingUser

logger = logging.getLogger("spot.auth")

DIGITS = "0123456789"


def generate_code(length=None) -> str:
    length = length or settings.OTP_LENGTH
    return "".join(secrets.choice(DIGITS) for _ in range(length))


def issue_otp(email: str, purpose: str) -> str:
    """
    Drop earlier codes of the same purpose and store a fresh hashed one.
    Returns the plain code so the caller can mail it.
    """
    OneTimePassword.objects.filter(email=email, purpose=purpose).delete()
    code = generate_code()
    OneTimePassword.objects.create(
        email=email,
        purpose=purpose,
        code_hash=make_password(code),
    )
    logger.info("Issued %s OTP for %s", purpose, email)
    return code


def latest_otp(email: str, purpose: str):
    cutoff = timezone.now() - settings.OTP_TTL
    return (
        OneTimePassword.objects
        .filter(email=email, purpose=purpose, created_at__gt=cutoff)
        .order_by("-created_at", "-id")
        .first()
    )


def otp_matches(otp, code) -> bool:
    if otp is None or not code:
        return False
    return check_password(str(code).strip(), otp.code_hash)


def consume_otp(otp) -> bool:
    """
    Conditional delete: only one caller can remove a given row.
    False means somebody else consumed it first.
    """
    deleted, _ = OneTimePassword.objects.filter(pk=otp.pk).delete()
    return deleted > 0


def clear_otps(email: str, purpose: str) -> None:
    OneTimePassword.objects.filter(email=email, purpose=purpose).delete()


def live_pending_user(email: str):
    pending = PendingUser.objects.filter(email=email).first()
    if pending is None or pending.is_expired():
        return None
    return pending


def purge_expired(now=None):
    """
    Remove expired OTP and PendingUser rows.
    Returns (otps_deleted, pending_deleted).
    """
    now = now or timezone.now()
    otps, _ = OneTimePassword.objects.filter(created_at__lte=now - settings.OTP_TTL).delete()
    pending, _ = PendingUser.objects.filter(
        created_at__lte=now - settings.PENDING_USER_TTL
    ).delete()
    return otps, pending
