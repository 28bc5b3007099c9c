# dashboards/services/admin.py

import logging
from decimal import Decimal

from django.db import transaction
from django.db.models import Count, Q, Sum
from django.utils import timezone

from core.media import delete_image
from events.models import Event
from payments.models import PaymentTransaction, Payout
from tickets.models import Ticket
from users.models import User

logger = logging.getLogger("spot.admin")

ZERO = Decimal("0.00")


class AdminAlreadyExists(Exception):
    pass


def admin_exists() -> bool:
    return User.objects.filter(Q(role=User.ROLE_ADMIN) | Q(is_superuser=True)).exists()


@transaction.atomic
def register_first_admin(*, name, email, password):
    """
    Bootstrap: only possible while no admin account exists.
    The account is also a Django superuser (admin site access).
    """
    if admin_exists():
        raise AdminAlreadyExists()
    user = User.objects.create_superuser(email=email, password=password, name=name)
    logger.info("First admin account %s created", user.pk)
    return user


def delete_event(event):
    """
    Admin removal: tickets and check-ins go with the event, payment
    records stay (their event becomes NULL).
    """
    cover = event.cover_image
    event_id = event.pk
    event.delete()
    try:
        delete_image(cover)
    except Exception as exc:
        logger.warning("Could not delete cover image %s: %s", cover, exc)
    logger.info("Event %s deleted by admin", event_id)


def toggle_publish(event):
    event.is_published = not event.is_published
    event.save(update_fields=["is_published", "updated_at"])
    return event


def record_payout(*, organizer, amount, period_start, period_end, approved_by):
    """
    Funds are moved outside the platform; the row is written as paid.
    """
    payout = Payout.objects.create(
        organizer=organizer,
        amount=amount,
        period_start=period_start,
        period_end=period_end,
        status=Payout.STATUS_PAID,
        paid_at=timezone.now(),
        approved_by=approved_by,
    )
    logger.info("Payout %s of %s recorded for organizer %s", payout.pk, amount, organizer.pk)
    return payout


def get_platform_stats():
    users = User.objects.aggregate(
        total=Count("id"),
        organizers=Count("id", filter=Q(role=User.ROLE_ORGANIZER)),
        premium=Count("id", filter=Q(is_premium=True)),
    )
    events = Event.objects.aggregate(
        total=Count("id"),
        published=Count("id", filter=Q(is_published=True)),
    )
    tickets = Ticket.objects.aggregate(
        sold=Count("id", filter=Q(status__in=Ticket.ACTIVE_STATUSES)),
        checked_in=Count("id", filter=Q(status=Ticket.STATUS_USED)),
    )
    success = Q(status=PaymentTransaction.STATUS_SUCCESS)
    payments = PaymentTransaction.objects.aggregate(
        gross=Sum("amount", filter=success),
        fees=Sum("platform_fee", filter=success),
        refunds=Count("id", filter=Q(status=PaymentTransaction.STATUS_REFUNDED)),
    )
    paid_out = Payout.objects.filter(status=Payout.STATUS_PAID).aggregate(total=Sum("amount"))

    return {
        "users": users["total"],
        "organizers": users["organizers"],
        "premiumUsers": users["premium"],
        "events": events["total"],
        "publishedEvents": events["published"],
        "ticketsSold": tickets["sold"],
        "checkedIn": tickets["checked_in"],
        "grossRevenue": payments["gross"] or ZERO,
        "platformFees": payments["fees"] or ZERO,
        "refunds": payments["refunds"],
        "paidOut": paid_out["total"] or ZERO,
    }
