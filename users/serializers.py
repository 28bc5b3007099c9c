import json

from rest_framework import serializers

from core.media import image_url
from .models import User


class LocationSerializer(serializers.Serializer):
    lat = serializers.FloatField(min_value=-90, max_value=90)
    lng = serializers.FloatField(min_value=-180, max_value=180)


class UserSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ["id", "name", "email", "role"]


class UserSerializer(serializers.ModelSerializer):
    isPremium = serializers.BooleanField(source="is_premium", read_only=True)
    location = serializers.SerializerMethodField()
    profileImage = serializers.SerializerMethodField()
    bookmarks = serializers.PrimaryKeyRelatedField(many=True, read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)

    class Meta:
        model = User
        fields = [
            "id",
            "name",
            "email",
            "role",
            "isPremium",
            "interests",
            "location",
            "profileImage",
            "bookmarks",
            "createdAt",
        ]

    def get_location(self, obj):
        return {"lat": obj.location_lat, "lng": obj.location_lng}

    def get_profileImage(self, obj):
        return image_url(obj.profile_image, self.context.get("request"))


class InterestsField(serializers.ListField):
    """
    List of tags. Multipart forms may send them as repeated keys,
    a single JSON-encoded array or a comma separated string.
    """
    child = serializers.CharField(max_length=64)

    def to_internal_value(self, data):
        if isinstance(data, str):
            data = [data]
        if isinstance(data, list) and len(data) == 1 and isinstance(data[0], str):
            raw = data[0].strip()
            if raw.startswith("["):
                try:
                    data = json.loads(raw)
                except ValueError:
                    raise serializers.ValidationError("Interests must be a list of strings")
            elif "," in raw:
                data = [part.strip() for part in raw.split(",") if part.strip()]
        return super().to_internal_value(data)


class UpdateProfileSerializer(serializers.Serializer):
    """
    PUT /api/users/update/

    Every field is optional; the role can only change via upgrade-role.
    """
    name = serializers.CharField(max_length=150, required=False)
    email = serializers.EmailField(required=False)
    interests = InterestsField(required=False)
    location = LocationSerializer(required=False)
    profileImage = serializers.ImageField(required=False)

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Name cannot be blank")
        if User.objects.filter(name=value).exclude(pk=self.instance.pk).exists():
            raise serializers.ValidationError("Name is already taken")
        return value

    def validate_email(self, value):
        value = value.strip().lower()
        if User.objects.filter(email__iexact=value).exclude(pk=self.instance.pk).exists():
            raise serializers.ValidationError("Email is already in use")
        return value

    def update(self, instance, validated_data):
        validated_data.pop("profileImage", None)
        location = validated_data.pop("location", None)
        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        if location:
            instance.location_lat = location["lat"]
            instance.location_lng = location["lng"]
        instance.save()
        return instance
