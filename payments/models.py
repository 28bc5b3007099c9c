"""
Money records: gateway payments, organizer payouts and plan subscriptions.
"""
from django.conf import settings
from django.db import models


class PaymentTransaction(models.Model):
    """
    One row per gateway payment intent.

    Created by the payment_intent.succeeded webhook; the intent id is the
    idempotency key for webhook replays. success -> refunded only.
    """
    STATUS_SUCCESS = "success"
    STATUS_REFUNDED = "refunded"

    STATUS_CHOICES = [
        (STATUS_SUCCESS, "Success"),
        (STATUS_REFUNDED, "Refunded"),
    ]

    payment_intent_id = models.CharField(max_length=255, unique=True)
    event = models.ForeignKey(
        "events.Event",
        on_delete=models.SET_NULL,
        related_name="transactions",
        null=True,
        blank=True,
    )
    organizer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="sales",
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="payments",
    )
    quantity = models.PositiveIntegerField(default=1)
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    currency = models.CharField(max_length=10, default="usd")
    platform_fee = models.DecimalField(max_digits=12, decimal_places=2)
    organizer_share = models.DecimalField(max_digits=12, decimal_places=2)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_SUCCESS)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user", "created_at"], name="txn_user_created_idx"),
            models.Index(fields=["organizer", "created_at"], name="txn_org_created_idx"),
            models.Index(fields=["event", "status"], name="txn_event_status_idx"),
        ]

    def __str__(self):
        return f"{self.payment_intent_id} ({self.status})"


class Payout(models.Model):
    STATUS_PENDING = "pending"
    STATUS_PAID = "paid"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_PAID, "Paid"),
    ]

    organizer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="payouts",
    )
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    period_start = models.DateTimeField()
    period_end = models.DateTimeField()
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_PENDING)
    paid_at = models.DateTimeField(blank=True, null=True)
    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name="approved_payouts",
        null=True,
        blank=True,
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"Payout {self.amount} -> {self.organizer_id} ({self.status})"


class Subscription(models.Model):
    PLAN_FREE = "free"
    PLAN_PRO = "pro"
    PLAN_CHOICES = [(PLAN_FREE, "Free"), (PLAN_PRO, "Pro")]

    STATUS_ACTIVE = "active"
    STATUS_CANCELLED = "cancelled"
    STATUS_CHOICES = [(STATUS_ACTIVE, "Active"), (STATUS_CANCELLED, "Cancelled")]

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="subscriptions",
    )
    plan = models.CharField(max_length=16, choices=PLAN_CHOICES, default=PLAN_PRO)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_ACTIVE)
    current_period_end = models.DateTimeField()
    stripe_customer_id = models.CharField(max_length=255, blank=True, null=True)
    stripe_subscription_id = models.CharField(max_length=255, blank=True, null=True)

    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.user_id} {self.plan} ({self.status})"
