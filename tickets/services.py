# tickets/services.py
"""
Ticket issuance (after a confirmed payment) and gate check-in.
"""
import json
import logging
import uuid

from django.db import transaction
from django.utils import timezone

from events.models import AnalyticsEvent, Event
from events.policies import active_ticket_count

from .models import CheckIn, Ticket

logger = logging.getLogger("spot.tickets")

TICKET_CODE_PREFIX = "TICKET-"
DEFAULT_CHECKIN_LOCATION = "Main Entrance"


class CheckInError(Exception):
    def __init__(self, message, status_code=400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def new_ticket_code() -> str:
    return f"{TICKET_CODE_PREFIX}{uuid.uuid4().hex[:8].upper()}"


def _unique_codes(count):
    codes = set()
    while len(codes) < count:
        candidates = {new_ticket_code() for _ in range(count - len(codes))}
        taken = set(
            Ticket.objects.filter(ticket_code__in=candidates).values_list("ticket_code", flat=True)
        )
        codes |= candidates - taken
    return sorted(codes)


def build_qr_payload(code, event_id, user_id, transaction_id, issued_at) -> str:
    return json.dumps(
        {
            "ticketCode": code,
            "eventId": event_id,
            "userId": user_id,
            "transactionId": transaction_id,
            "issuedAt": issued_at.isoformat(),
        }
    )


def remaining_capacity(event) -> int:
    return event.capacity - active_ticket_count(event)


def issue_tickets(payment):
    """
    Create exactly payment.quantity tickets for a PaymentTransaction.
    Must run inside the caller's transaction so a failure leaves no
    half-issued batch behind.
    """
    issued_at = timezone.now()
    tickets = [
        Ticket(
            event_id=payment.event_id,
            user_id=payment.user_id,
            transaction=payment,
            ticket_code=code,
            qr_payload=build_qr_payload(code, payment.event_id, payment.user_id, payment.pk, issued_at),
        )
        for code in _unique_codes(payment.quantity)
    ]
    created = Ticket.objects.bulk_create(tickets)
    logger.info(
        "Issued %s tickets for user %s, event %s (payment %s)",
        len(created), payment.user_id, payment.event_id, payment.payment_intent_id,
    )
    return created


def cancel_tickets_for(payment) -> int:
    """Refund path: cancel the still-valid tickets of this payment only."""
    return Ticket.objects.filter(transaction=payment, status=Ticket.STATUS_VALID).update(
        status=Ticket.STATUS_CANCELLED,
        updated_at=timezone.now(),
    )


def _ensure_checkin_allowed(ticket):
    if ticket.status == Ticket.STATUS_USED:
        raise CheckInError("Ticket already used")
    if ticket.status == Ticket.STATUS_CANCELLED:
        raise CheckInError("Ticket is cancelled")


def _find_ticket(event, ticket_code):
    return Ticket.objects.filter(ticket_code=ticket_code, event=event).first()


def check_in_ticket(*, event_id, ticket_code, scanned_by, location=None):
    """
    Validate a scanned code against the event and its organizer, then
    flip the ticket valid -> used.

    The flip is a conditional update on status=valid, so of two
    concurrent scans only one writes; the other re-reads the ticket and
    gets the matching "already used" answer.
    """
    event = Event.objects.filter(pk=event_id).first()
    if event is None:
        raise CheckInError("Event not found", status_code=404)

    if event.organizer_id != scanned_by.pk:
        raise CheckInError("Unauthorized to check in for this event", status_code=403)

    ticket = _find_ticket(event, ticket_code)
    if ticket is None:
        raise CheckInError("Invalid ticket", status_code=404)

    _ensure_checkin_allowed(ticket)

    now = timezone.now()
    with transaction.atomic():
        updated = Ticket.objects.filter(pk=ticket.pk, status=Ticket.STATUS_VALID).update(
            status=Ticket.STATUS_USED,
            checked_in_at=now,
            updated_at=now,
        )
        if not updated:
            ticket.refresh_from_db()
            _ensure_checkin_allowed(ticket)
            raise CheckInError("Ticket is no longer valid")

        CheckIn.objects.create(
            event=event,
            ticket=ticket,
            scanned_by=scanned_by,
            location=location or DEFAULT_CHECKIN_LOCATION,
            scanned_at=now,
        )
        AnalyticsEvent.objects.create(event=event, type=AnalyticsEvent.TYPE_CHECKIN, user=scanned_by)

    ticket.refresh_from_db()
    logger.info("Ticket %s checked in at event %s by user %s", ticket.ticket_code, event.pk, scanned_by.pk)
    return ticket
