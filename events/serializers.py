# spot/events/serializers.py
from decimal import Decimal

from rest_framework import serializers

from core.media import image_url
from users.models import User

from .models import Event
from .policies import active_ticket_count
from .sanitizers import sanitize_description, sanitize_line, sanitize_title


class OrganizerSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ["id", "name", "email"]


class EventSerializer(serializers.ModelSerializer):
    organizer = OrganizerSerializer(read_only=True)
    location = serializers.SerializerMethodField()
    startDate = serializers.DateTimeField(source="start_date")
    endDate = serializers.DateTimeField(source="end_date")
    coverImage = serializers.SerializerMethodField()
    isPublished = serializers.BooleanField(source="is_published")
    createdAt = serializers.DateTimeField(source="created_at")
    updatedAt = serializers.DateTimeField(source="updated_at")

    class Meta:
        model = Event
        fields = [
            "id",
            "title",
            "description",
            "category",
            "location",
            "startDate",
            "endDate",
            "price",
            "capacity",
            "coverImage",
            "isPublished",
            "organizer",
            "createdAt",
            "updatedAt",
        ]
        read_only_fields = fields

    def get_location(self, obj):
        return {"city": obj.city, "lat": obj.location_lat, "lng": obj.location_lng}

    def get_coverImage(self, obj):
        return image_url(obj.cover_image, self.context.get("request"))


class EventSummarySerializer(serializers.ModelSerializer):
    """Compact form embedded in tickets and transactions."""
    startDate = serializers.DateTimeField(source="start_date")
    endDate = serializers.DateTimeField(source="end_date")

    class Meta:
        model = Event
        fields = ["id", "title", "category", "city", "startDate", "endDate", "price"]


class EventLocationSerializer(serializers.Serializer):
    city = serializers.CharField(max_length=120)
    lat = serializers.FloatField(min_value=-90, max_value=90)
    lng = serializers.FloatField(min_value=-180, max_value=180)


class EventWriteSerializer(serializers.Serializer):
    """
    Create (POST) and update (PUT, partial) payload.

    Accepts JSON or multipart; nested location can be sent as
    location.city / location.lat / location.lng form keys.
    Publishing is not part of this payload (admin only).
    """
    title = serializers.CharField(max_length=255)
    description = serializers.CharField()
    category = serializers.CharField(max_length=64)
    location = EventLocationSerializer()
    startDate = serializers.DateTimeField()
    endDate = serializers.DateTimeField()
    price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal("0"))
    capacity = serializers.IntegerField(min_value=1)
    coverImage = serializers.ImageField(required=False)

    FIELD_MAP = {
        "title": "title",
        "description": "description",
        "category": "category",
        "startDate": "start_date",
        "endDate": "end_date",
        "price": "price",
        "capacity": "capacity",
    }

    def validate_title(self, value):
        value = sanitize_title(value)
        if not value:
            raise serializers.ValidationError("Title is required")
        return value

    def validate_description(self, value):
        value = sanitize_description(value)
        if not value.strip():
            raise serializers.ValidationError("Description is required")
        return value

    def validate_category(self, value):
        value = sanitize_line(value, 64)
        if not value:
            raise serializers.ValidationError("Category is required")
        return value

    def validate(self, attrs):
        start = attrs.get("startDate", getattr(self.instance, "start_date", None))
        end = attrs.get("endDate", getattr(self.instance, "end_date", None))
        if start and end and end <= start:
            raise serializers.ValidationError({"endDate": "End date must be after the start date"})

        location = attrs.get("location")
        if location and "city" in location:
            location["city"] = sanitize_line(location["city"], 120)
            if not location["city"]:
                raise serializers.ValidationError({"location": {"city": "City is required"}})

        if self.instance is not None and "capacity" in attrs:
            sold = active_ticket_count(self.instance)
            if attrs["capacity"] < sold:
                raise serializers.ValidationError(
                    {"capacity": f"Capacity cannot be lower than the {sold} tickets already sold"}
                )
        return attrs

    def _model_values(self, validated_data):
        values = {
            model_field: validated_data[field]
            for field, model_field in self.FIELD_MAP.items()
            if field in validated_data
        }
        location = validated_data.get("location") or {}
        if "city" in location:
            values["city"] = location["city"]
        if "lat" in location:
            values["location_lat"] = location["lat"]
        if "lng" in location:
            values["location_lng"] = location["lng"]
        return values

    def create(self, validated_data):
        return Event.objects.create(
            organizer=validated_data["organizer"],
            cover_image=validated_data.get("cover_image"),
            is_published=False,
            **self._model_values(validated_data),
        )

    def update(self, instance, validated_data):
        for attr, value in self._model_values(validated_data).items():
            setattr(instance, attr, value)
        if "cover_image" in validated_data:
            instance.cover_image = validated_data["cover_image"]
        instance.save()
        return instance
