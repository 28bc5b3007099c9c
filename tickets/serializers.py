from rest_framework import serializers

from core.media import image_url
from events.models import Event

from .models import Ticket


class TicketEventSerializer(serializers.ModelSerializer):
    startDate = serializers.DateTimeField(source="start_date")
    endDate = serializers.DateTimeField(source="end_date")
    coverImage = serializers.SerializerMethodField()
    location = serializers.SerializerMethodField()

    class Meta:
        model = Event
        fields = ["id", "title", "coverImage", "startDate", "endDate", "location", "price"]

    def get_coverImage(self, obj):
        return image_url(obj.cover_image, self.context.get("request"))

    def get_location(self, obj):
        return {"city": obj.city, "lat": obj.location_lat, "lng": obj.location_lng}


class TicketSerializer(serializers.ModelSerializer):
    event = TicketEventSerializer(read_only=True)
    ticketCode = serializers.CharField(source="ticket_code")
    qrPayload = serializers.CharField(source="qr_payload")
    transactionId = serializers.IntegerField(source="transaction_id", allow_null=True)
    checkedInAt = serializers.DateTimeField(source="checked_in_at", allow_null=True)
    createdAt = serializers.DateTimeField(source="created_at")

    class Meta:
        model = Ticket
        fields = [
            "id",
            "ticketCode",
            "qrPayload",
            "status",
            "checkedInAt",
            "transactionId",
            "event",
            "createdAt",
        ]
        read_only_fields = fields


class CheckInSerializer(serializers.Serializer):
    ticketCode = serializers.CharField(max_length=32)
    eventId = serializers.IntegerField(min_value=1)
    location = serializers.CharField(max_length=255, required=False, allow_blank=True)

    def validate_ticketCode(self, value):
        return value.strip().upper()
