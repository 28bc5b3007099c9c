# authx/emails.py
from django.conf import settings
from django.core.mail import send_mail

from users.models import OneTimePassword


SUBJECTS = {
    OneTimePassword.PURPOSE_SIGNUP: "Verify your email - Spot",
    OneTimePassword.PURPOSE_FORGOT_PASSWORD: "Reset your password - Spot",
}

INTROS = {
    OneTimePassword.PURPOSE_SIGNUP: "Thanks for signing up! Use this code to verify your email:",
    OneTimePassword.PURPOSE_FORGOT_PASSWORD: "Use this code to reset your password:",
}


def send_otp_email(email: str, code: str, purpose: str):
    """
    Mail a one-time code. Delivery errors propagate so the caller
    can answer with a 500 instead of claiming the code was sent.
    """
    minutes = int(settings.OTP_TTL.total_seconds() // 60)
    intro = INTROS[purpose]

    message = (
        f"{intro}\n\n"
        f"    {code}\n\n"
        f"This code expires in {minutes} minutes. Do not share it with anyone.\n\n"
        f"Spot Events"
    )
    html_message = (
        '<div style="font-family: Arial, sans-serif; max-width: 480px; margin: 0 auto; '
        'text-align: center;">'
        f"<p>{intro}</p>"
        '<p style="font-size: 32px; font-weight: 700; letter-spacing: 8px; color: #2563eb;">'
        f"{code}</p>"
        f"<p style=\"color: #94a3b8; font-size: 13px;\">This code expires in "
        f"<strong>{minutes} minutes</strong>. Do not share it with anyone.</p>"
        "</div>"
    )

    send_mail(
        subject=SUBJECTS[purpose],
        message=message,
        from_email=getattr(settings, "DEFAULT_FROM_EMAIL", None),
        recipient_list=[email],
        html_message=html_message,
        fail_silently=False,
    )
