from django.conf import settings
from django.db import models
from django.utils import timezone


class Ticket(models.Model):
    STATUS_VALID = "valid"
    STATUS_USED = "used"
    STATUS_CANCELLED = "cancelled"

    STATUS_CHOICES = [
        (STATUS_VALID, "Valid"),
        (STATUS_USED, "Used"),
        (STATUS_CANCELLED, "Cancelled"),
    ]

    # Tickets that still hold a seat / block event deletion
    ACTIVE_STATUSES = (STATUS_VALID, STATUS_USED)

    event = models.ForeignKey(
        "events.Event",
        on_delete=models.CASCADE,
        related_name="tickets",
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="tickets",
    )
    # Refunds cancel exactly the tickets bought in that payment
    transaction = models.ForeignKey(
        "payments.PaymentTransaction",
        on_delete=models.SET_NULL,
        related_name="tickets",
        null=True,
        blank=True,
    )
    ticket_code = models.CharField(max_length=32, unique=True)
    qr_payload = models.TextField()
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_VALID)
    checked_in_at = models.DateTimeField(blank=True, null=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=["event", "ticket_code"], name="ticket_event_code_idx"),
            models.Index(fields=["user", "created_at"], name="ticket_user_created_idx"),
            models.Index(fields=["event", "status"], name="ticket_event_status_idx"),
        ]

    def __str__(self):
        return f"{self.ticket_code} ({self.status})"


class CheckIn(models.Model):
    """
    Audit row written for every successful check-in.
    Append-only; duplicate protection lives on Ticket.status.
    """
    event = models.ForeignKey(
        "events.Event",
        on_delete=models.CASCADE,
        related_name="checkins",
    )
    ticket = models.ForeignKey(
        Ticket,
        on_delete=models.CASCADE,
        related_name="checkins",
    )
    scanned_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name="scans",
        null=True,
        blank=True,
    )
    location = models.CharField(max_length=255, default="Main Entrance")
    scanned_at = models.DateTimeField(default=timezone.now)

    class Meta:
        indexes = [
            models.Index(fields=["event", "scanned_at"], name="checkin_event_scanned_idx"),
        ]

    def __str__(self):
        return f"{self.scanned_by_id} - {self.ticket_id} @ {self.scanned_at}"
