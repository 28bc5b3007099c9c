# dashboards/services/organizer.py

from decimal import Decimal

from django.db.models import Count, Q, Sum

from events.models import AnalyticsEvent, Event
from payments.models import PaymentTransaction
from tickets.models import Ticket

ZERO = Decimal("0.00")


def get_organizer_events(user):
    """
    The organizer's own events, newest first, with live ticket counts.
    """
    return (
        Event.objects
        .filter(organizer=user)
        .select_related("organizer")
        .annotate(
            tickets_sold=Count("tickets", filter=Q(tickets__status__in=Ticket.ACTIVE_STATUSES)),
            checked_in=Count("tickets", filter=Q(tickets__status=Ticket.STATUS_USED)),
        )
        .order_by("-created_at", "-id")
    )


def get_event_stats(event):
    tickets = Ticket.objects.filter(event=event).aggregate(
        sold=Count("id", filter=Q(status__in=Ticket.ACTIVE_STATUSES)),
        checked_in=Count("id", filter=Q(status=Ticket.STATUS_USED)),
        cancelled=Count("id", filter=Q(status=Ticket.STATUS_CANCELLED)),
    )

    success = Q(status=PaymentTransaction.STATUS_SUCCESS)
    refunded = Q(status=PaymentTransaction.STATUS_REFUNDED)
    money = PaymentTransaction.objects.filter(event=event).aggregate(
        gross=Sum("amount", filter=success),
        earnings=Sum("organizer_share", filter=success),
        fees=Sum("platform_fee", filter=success),
        refunds=Count("id", filter=refunded),
        refunded_amount=Sum("amount", filter=refunded),
    )

    views = AnalyticsEvent.objects.filter(event=event, type=AnalyticsEvent.TYPE_VIEW).count()

    return {
        "totalTicketsSold": tickets["sold"],
        "checkedInCount": tickets["checked_in"],
        "cancelledCount": tickets["cancelled"],
        "remainingCapacity": max(event.capacity - tickets["sold"], 0),
        "revenue": money["gross"] or ZERO,
        "organizerEarnings": money["earnings"] or ZERO,
        "platformFees": money["fees"] or ZERO,
        "refunds": money["refunds"],
        "refundedAmount": money["refunded_amount"] or ZERO,
        "views": views,
    }
