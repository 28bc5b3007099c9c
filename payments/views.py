# payments/views.py
import logging
from datetime import timedelta

from django.conf import settings
from django.db import transaction
from django.utils import timezone
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from core.generics import api_error
from core.permissions import IsOrganizerOnly
from core.throttles import PAYMENT_THROTTLES
from events.models import Event
from tickets.services import remaining_capacity
from users.models import User

from . import webhooks
from .gateway import GatewayError, WebhookError, create_payment_intent, parse_webhook
from .models import Subscription
from .serializers import CreateOrderSerializer, CreateSubscriptionSerializer, SubscriptionSerializer

logger = logging.getLogger("spot.payments")

SUBSCRIPTION_PERIOD = timedelta(days=30)


class CreateOrderView(APIView):
    """
    POST /api/payments/create-order/
    Body: {"eventId": 1, "quantity": 2}

    Creates a Stripe PaymentIntent. Tickets are only issued once the
    payment_intent.succeeded webhook arrives.
    """
    permission_classes = [IsAuthenticated]
    throttle_classes = PAYMENT_THROTTLES

    def post(self, request):
        serializer = CreateOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        event_id = serializer.validated_data["eventId"]
        quantity = serializer.validated_data["quantity"]

        event = Event.objects.filter(pk=event_id).first()
        if event is None:
            return api_error("Event not found", status.HTTP_404_NOT_FOUND)
        if not event.is_published:
            return api_error("Event is not available")

        remaining = remaining_capacity(event)
        if quantity > remaining:
            return api_error(f"Only {max(remaining, 0)} ticket(s) remaining")

        amount = event.price * quantity
        currency = settings.STRIPE_CURRENCY
        try:
            intent = create_payment_intent(
                amount=amount,
                currency=currency,
                description=f"{quantity} x {event.title}",
                metadata={
                    "user_id": str(request.user.pk),
                    "event_id": str(event.pk),
                    "quantity": str(quantity),
                    "event_title": event.title[:200],
                },
            )
        except GatewayError as exc:
            return api_error(exc.message, exc.status_code)

        return Response({
            "clientSecret": intent["client_secret"],
            "paymentIntentId": intent["id"],
            "amount": intent["amount"],
            "currency": intent["currency"],
            "publishableKey": settings.STRIPE_PUBLISHABLE_KEY,
        })


class StripeWebhookView(APIView):
    """
    POST /api/payments/verify/  (alias /api/payments/webhook/)

    Reads the raw body for signature verification; request.data is never
    touched so the body is not consumed by a parser first.
    """
    permission_classes = [AllowAny]
    authentication_classes = []
    # Trust comes from the signature; gateway retries must not hit 429
    throttle_classes = []

    def post(self, request):
        try:
            event = parse_webhook(request.body, request.META.get("HTTP_STRIPE_SIGNATURE"))
        except WebhookError as exc:
            logger.warning("Rejected webhook: %s", exc)
            return api_error(f"Webhook Error: {exc}")

        webhooks.dispatch(event)
        return Response({"received": True})


class CreateSubscriptionView(APIView):
    """
    POST /api/subscriptions/create/

    No gateway round-trip: a 30 day plan is recorded and the organizer
    is flagged premium.
    """
    permission_classes = [IsAuthenticated, IsOrganizerOnly]

    def post(self, request):
        serializer = CreateSubscriptionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = request.user

        with transaction.atomic():
            if Subscription.objects.filter(user=user, status=Subscription.STATUS_ACTIVE).exists():
                return api_error("You already have an active subscription")

            subscription = Subscription.objects.create(
                user=user,
                plan=serializer.validated_data["plan"],
                status=Subscription.STATUS_ACTIVE,
                current_period_end=timezone.now() + SUBSCRIPTION_PERIOD,
            )
            User.objects.filter(pk=user.pk).update(is_premium=True)

        logger.info("User %s subscribed to %s", user.pk, subscription.plan)
        return Response({
            "message": "Subscription created successfully",
            "subscription": SubscriptionSerializer(subscription).data,
        })


class MySubscriptionView(APIView):
    """
    GET /api/subscriptions/me/
    """
    permission_classes = [IsAuthenticated, IsOrganizerOnly]

    def get(self, request):
        user = request.user
        subscription = (
            Subscription.objects
            .filter(user=user, status=Subscription.STATUS_ACTIVE)
            .order_by("-created_at")
            .first()
        )
        return Response({
            "isPremium": user.is_premium,
            "role": user.role,
            "subscription": SubscriptionSerializer(subscription).data if subscription else None,
        })
