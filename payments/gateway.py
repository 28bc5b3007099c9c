# payments/gateway.py
"""
Stripe wrapper: PaymentIntent creation and webhook payload verification.

Stripe SDK errors are translated into GatewayError with the HTTP status
the API should answer with.
"""
import json
import logging
from decimal import ROUND_HALF_UP, Decimal

import stripe
from django.conf import settings
from rest_framework import status

logger = logging.getLogger("spot.payments")

CENTS = Decimal("0.01")

# Most specific first: CardError etc. all derive from StripeError
ERROR_MAP = (
    (stripe.CardError, status.HTTP_402_PAYMENT_REQUIRED, "Your card was declined"),
    (stripe.RateLimitError, status.HTTP_429_TOO_MANY_REQUESTS, "Payment provider is busy, please retry shortly"),
    (stripe.InvalidRequestError, status.HTTP_400_BAD_REQUEST, "Invalid payment request"),
    (stripe.AuthenticationError, status.HTTP_500_INTERNAL_SERVER_ERROR, "Payment provider is not configured correctly"),
    (stripe.APIConnectionError, status.HTTP_503_SERVICE_UNAVAILABLE, "Payment provider is unreachable"),
)


class GatewayError(Exception):
    def __init__(self, message, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class WebhookError(Exception):
    """Signature or payload could not be trusted/parsed (answered with 400)."""


def map_gateway_error(exc) -> GatewayError:
    for error_class, status_code, message in ERROR_MAP:
        if isinstance(exc, error_class):
            # Card declines carry a user-facing message worth passing on
            if error_class is stripe.CardError and getattr(exc, "user_message", None):
                message = exc.user_message
            return GatewayError(message, status_code)
    return GatewayError("Payment provider error")


def to_minor_units(amount) -> int:
    return int((Decimal(amount) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def from_minor_units(value) -> Decimal:
    return (Decimal(value) / 100).quantize(CENTS)


def split_amount(gross):
    """
    Platform fee (PLATFORM_FEE_PERCENT of gross, rounded to cents)
    and the organizer's share of the rest.
    """
    gross = Decimal(gross).quantize(CENTS)
    percent = Decimal(str(settings.PLATFORM_FEE_PERCENT))
    fee = (gross * percent / 100).quantize(CENTS, rounding=ROUND_HALF_UP)
    return fee, gross - fee


def create_payment_intent(*, amount, currency, metadata, description=""):
    try:
        intent = stripe.PaymentIntent.create(
            api_key=settings.STRIPE_SECRET_KEY,
            amount=to_minor_units(amount),
            currency=currency,
            metadata=metadata,
            description=description,
            automatic_payment_methods={"enabled": True},
        )
    except stripe.StripeError as exc:
        logger.error("PaymentIntent creation failed: %s", exc)
        raise map_gateway_error(exc) from exc

    logger.info("Created PaymentIntent %s for %s %s", intent["id"], intent["amount"], currency)
    return intent


def parse_webhook(payload: bytes, sig_header) -> dict:
    """
    Verify the Stripe-Signature header and decode the event.

    Without STRIPE_WEBHOOK_SECRET the payload is accepted unverified,
    which is only acceptable in local development.
    """
    try:
        body = payload.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise WebhookError("Invalid payload") from exc

    secret = settings.STRIPE_WEBHOOK_SECRET
    if secret:
        if not sig_header:
            raise WebhookError("Missing Stripe-Signature header")
        try:
            stripe.WebhookSignature.verify_header(
                body, sig_header, secret, stripe.Webhook.DEFAULT_TOLERANCE
            )
        except stripe.SignatureVerificationError as exc:
            raise WebhookError("Invalid signature") from exc
    else:
        logger.warning("STRIPE_WEBHOOK_SECRET is not set; accepting webhook without signature check")

    try:
        event = json.loads(body)
    except ValueError as exc:
        raise WebhookError("Invalid payload") from exc

    if not isinstance(event, dict) or "type" not in event:
        raise WebhookError("Invalid payload")
    return event
