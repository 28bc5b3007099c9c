from rest_framework import serializers

from events.serializers import EventSerializer
from users.models import User


class OrganizerEventSerializer(EventSerializer):
    ticketsSold = serializers.IntegerField(source="tickets_sold", read_only=True)
    checkedIn = serializers.IntegerField(source="checked_in", read_only=True)

    class Meta(EventSerializer.Meta):
        fields = EventSerializer.Meta.fields + ["ticketsSold", "checkedIn"]
        read_only_fields = fields


class AdminRegisterSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=150)
    email = serializers.EmailField()
    password = serializers.CharField(min_length=6, write_only=True)

    def validate_email(self, value):
        value = value.strip().lower()
        if User.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError("User already exists")
        return value

    def validate_name(self, value):
        value = value.strip()
        if User.objects.filter(name=value).exists():
            raise serializers.ValidationError("Name is already taken")
        return value
