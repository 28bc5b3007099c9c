# payments/webhooks.py
"""
Stripe webhook dispatch.

payment_intent.succeeded  -> PaymentTransaction + tickets (idempotent on intent id)
payment_intent.payment_failed -> logged
charge.refunded           -> transaction refunded, its valid tickets cancelled

Database errors are not caught here: the view answers 500 and Stripe
redelivers, which the intent-id check makes safe.
"""
import logging

from django.db import IntegrityError, transaction
from django.utils import timezone

from events.models import Event
from tickets.services import cancel_tickets_for, issue_tickets
from users.models import User

from .gateway import from_minor_units, split_amount
from .models import PaymentTransaction

logger = logging.getLogger("spot.payments")


def _metadata_int(metadata, key):
    try:
        return int(metadata.get(key))
    except (TypeError, ValueError):
        return None


def handle_payment_succeeded(intent):
    intent_id = intent["id"]
    if PaymentTransaction.objects.filter(payment_intent_id=intent_id).exists():
        logger.info("PaymentIntent %s already processed, skipping replay", intent_id)
        return None

    metadata = intent.get("metadata") or {}
    user_id = _metadata_int(metadata, "user_id")
    event_id = _metadata_int(metadata, "event_id")
    quantity = _metadata_int(metadata, "quantity")

    event = Event.objects.filter(pk=event_id).first() if event_id else None
    user = User.objects.filter(pk=user_id).first() if user_id else None
    if event is None or user is None or not quantity or quantity < 1:
        # Nothing we can issue against; redelivery would not help
        logger.error("PaymentIntent %s has unusable metadata: %s", intent_id, metadata)
        return None

    gross = from_minor_units(intent.get("amount_received") or intent["amount"])
    fee, share = split_amount(gross)

    try:
        with transaction.atomic():
            payment = PaymentTransaction.objects.create(
                payment_intent_id=intent_id,
                event=event,
                organizer_id=event.organizer_id,
                user=user,
                quantity=quantity,
                amount=gross,
                currency=(intent.get("currency") or "usd").lower(),
                platform_fee=fee,
                organizer_share=share,
                status=PaymentTransaction.STATUS_SUCCESS,
            )
            issue_tickets(payment)
    except IntegrityError:
        # A concurrent delivery of the same intent won the insert
        if PaymentTransaction.objects.filter(payment_intent_id=intent_id).exists():
            logger.info("PaymentIntent %s processed concurrently, skipping", intent_id)
            return None
        raise

    logger.info("Recorded payment %s: %s tickets for event %s", intent_id, quantity, event.pk)
    return payment


def handle_payment_failed(intent):
    error = intent.get("last_payment_error") or {}
    logger.warning(
        "Payment failed for intent %s: %s",
        intent.get("id"),
        error.get("message", "unknown reason"),
    )


def handle_charge_refunded(charge):
    intent_id = charge.get("payment_intent")
    if not intent_id:
        logger.warning("Refunded charge %s has no payment intent", charge.get("id"))
        return None

    payment = PaymentTransaction.objects.filter(payment_intent_id=intent_id).first()
    if payment is None:
        logger.warning("Refund for unknown payment intent %s", intent_id)
        return None

    with transaction.atomic():
        flipped = PaymentTransaction.objects.filter(
            pk=payment.pk,
            status=PaymentTransaction.STATUS_SUCCESS,
        ).update(status=PaymentTransaction.STATUS_REFUNDED, updated_at=timezone.now())
        if not flipped:
            logger.info("Payment %s already refunded", intent_id)
            return None
        cancelled = cancel_tickets_for(payment)

    logger.info("Refunded payment %s, cancelled %s tickets", intent_id, cancelled)
    return payment


HANDLERS = {
    "payment_intent.succeeded": handle_payment_succeeded,
    "payment_intent.payment_failed": handle_payment_failed,
    "charge.refunded": handle_charge_refunded,
}


def dispatch(event):
    handler = HANDLERS.get(event.get("type"))
    if handler is None:
        logger.debug("Ignoring webhook event type %s", event.get("type"))
        return
    obj = (event.get("data") or {}).get("object") or {}
    handler(obj)
