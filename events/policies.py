# spot/events/policies.py
"""
Who may change an event, and when.
"""
from core.generics import user_is_admin
from tickets.models import Ticket


def can_modify_event(user, event) -> bool:
    """
    Owner, or a platform admin. Any other caller (including other
    organizers) is refused.
    """
    if not user or not user.is_authenticated:
        return False
    if event.organizer_id == user.pk:
        return True
    return user_is_admin(user)


def has_active_tickets(event) -> bool:
    """A valid or used ticket means somebody paid for this event."""
    return Ticket.objects.filter(event=event, status__in=Ticket.ACTIVE_STATUSES).exists()


def active_ticket_count(event) -> int:
    return Ticket.objects.filter(event=event, status__in=Ticket.ACTIVE_STATUSES).count()
