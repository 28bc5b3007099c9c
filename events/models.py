# spot/events/models.py
from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone


class Event(models.Model):
    organizer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="organized_events",
    )
    title = models.CharField(max_length=255)
    description = models.TextField()
    category = models.CharField(max_length=64)

    # Location
    city = models.CharField(max_length=120)
    location_lat = models.FloatField()
    location_lng = models.FloatField()

    start_date = models.DateTimeField()
    end_date = models.DateTimeField()

    # Storage name (see core.media)
    cover_image = models.CharField(max_length=1024, blank=True, null=True)

    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(0)],
    )
    capacity = models.PositiveIntegerField(validators=[MinValueValidator(1)])

    is_published = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=["organizer"], name="event_organizer_idx"),
            models.Index(fields=["category", "is_published"], name="event_category_pub_idx"),
            models.Index(fields=["start_date", "is_published"], name="event_start_pub_idx"),
            models.Index(fields=["is_published", "created_at"], name="event_pub_created_idx"),
        ]

    def __str__(self):
        return self.title

    def has_started(self) -> bool:
        return self.start_date < timezone.now()


class AnalyticsEvent(models.Model):
    TYPE_VIEW = "view"
    TYPE_CLICK = "click"
    TYPE_CHECKIN = "checkin"

    TYPE_CHOICES = [
        (TYPE_VIEW, "View"),
        (TYPE_CLICK, "Click"),
        (TYPE_CHECKIN, "Check-in"),
    ]

    event = models.ForeignKey(
        Event,
        on_delete=models.CASCADE,
        related_name="analytics",
    )
    type = models.CharField(max_length=16, choices=TYPE_CHOICES)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=["event", "type"], name="analytics_event_type_idx"),
        ]

    def __str__(self):
        return f"{self.type} @ {self.event_id}"
