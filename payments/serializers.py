from django.conf import settings
from rest_framework import serializers

from events.serializers import EventSummarySerializer
from users.serializers import UserSummarySerializer

from .models import PaymentTransaction, Payout, Subscription


class CreateOrderSerializer(serializers.Serializer):
    eventId = serializers.IntegerField(min_value=1)
    quantity = serializers.IntegerField(
        min_value=1,
        max_value=settings.MAX_TICKETS_PER_ORDER,
        default=1,
        error_messages={
            "min_value": "Quantity must be between 1 and {max}".format(max=settings.MAX_TICKETS_PER_ORDER),
            "max_value": "Quantity must be between 1 and {max}".format(max=settings.MAX_TICKETS_PER_ORDER),
        },
    )


class PaymentTransactionSerializer(serializers.ModelSerializer):
    paymentIntentId = serializers.CharField(source="payment_intent_id")
    event = EventSummarySerializer(read_only=True)
    user = UserSummarySerializer(read_only=True)
    organizer = UserSummarySerializer(read_only=True)
    platformFee = serializers.DecimalField(source="platform_fee", max_digits=12, decimal_places=2)
    organizerShare = serializers.DecimalField(source="organizer_share", max_digits=12, decimal_places=2)
    createdAt = serializers.DateTimeField(source="created_at")

    class Meta:
        model = PaymentTransaction
        fields = [
            "id",
            "paymentIntentId",
            "event",
            "user",
            "organizer",
            "quantity",
            "amount",
            "currency",
            "platformFee",
            "organizerShare",
            "status",
            "createdAt",
        ]
        read_only_fields = fields


class PayoutSerializer(serializers.ModelSerializer):
    organizer = UserSummarySerializer(read_only=True)
    periodStart = serializers.DateTimeField(source="period_start")
    periodEnd = serializers.DateTimeField(source="period_end")
    paidAt = serializers.DateTimeField(source="paid_at")
    approvedBy = serializers.IntegerField(source="approved_by_id")
    createdAt = serializers.DateTimeField(source="created_at")

    class Meta:
        model = Payout
        fields = ["id", "organizer", "amount", "periodStart", "periodEnd", "status", "paidAt", "approvedBy", "createdAt"]
        read_only_fields = fields


class CreatePayoutSerializer(serializers.Serializer):
    organizerId = serializers.IntegerField(min_value=1)
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    periodStart = serializers.DateTimeField()
    periodEnd = serializers.DateTimeField()

    def validate_amount(self, value):
        if value <= 0:
            raise serializers.ValidationError("Amount must be greater than 0")
        return value

    def validate(self, attrs):
        if attrs["periodEnd"] <= attrs["periodStart"]:
            raise serializers.ValidationError({"periodEnd": "Period end must be after period start"})
        return attrs


class SubscriptionSerializer(serializers.ModelSerializer):
    currentPeriodEnd = serializers.DateTimeField(source="current_period_end")
    createdAt = serializers.DateTimeField(source="created_at")

    class Meta:
        model = Subscription
        fields = ["id", "plan", "status", "currentPeriodEnd", "createdAt"]
        read_only_fields = fields


class CreateSubscriptionSerializer(serializers.Serializer):
    plan = serializers.ChoiceField(choices=[c[0] for c in Subscription.PLAN_CHOICES], default=Subscription.PLAN_PRO)
