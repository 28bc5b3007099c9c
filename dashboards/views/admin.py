# dashboards/views/admin.py
"""
Platform administration: first-admin bootstrap, moderation of events,
payments overview and payout records.
"""
import logging

from django.db import IntegrityError
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from authx.tokens import issue_tokens, set_refresh_cookie
from core.generics import api_error
from core.permissions import IsPlatformAdmin
from core.throttles import AUTH_THROTTLES
from dashboards.serializers import AdminRegisterSerializer
from dashboards.services import admin as admin_service
from events.models import Event
from events.serializers import EventSerializer
from payments.models import PaymentTransaction
from payments.serializers import CreatePayoutSerializer, PaymentTransactionSerializer, PayoutSerializer
from users.models import User
from users.serializers import UserSerializer, UserSummarySerializer

logger = logging.getLogger("spot.admin")


class AdminView(APIView):
    permission_classes = [IsAuthenticated, IsPlatformAdmin]


class AdminExistsView(APIView):
    """
    GET /api/admin/check-exists/
    """
    permission_classes = [AllowAny]
    authentication_classes = []

    def get(self, request):
        return Response({"exists": admin_service.admin_exists()})


class AdminRegisterView(APIView):
    """
    POST /api/admin/register/

    Open only until the first admin exists.
    """
    permission_classes = [AllowAny]
    authentication_classes = []
    throttle_classes = AUTH_THROTTLES

    def post(self, request):
        if admin_service.admin_exists():
            return api_error(
                "An admin account already exists. Only one admin is allowed.",
                status.HTTP_403_FORBIDDEN,
            )

        serializer = AdminRegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            user = admin_service.register_first_admin(**serializer.validated_data)
        except admin_service.AdminAlreadyExists:
            return api_error(
                "An admin account already exists. Only one admin is allowed.",
                status.HTTP_403_FORBIDDEN,
            )
        except IntegrityError:
            return api_error("User already exists")

        access, refresh = issue_tokens(user)
        response = Response(
            {
                "message": "Admin account created successfully",
                "accessToken": access,
                "user": UserSummarySerializer(user).data,
            },
            status=status.HTTP_201_CREATED,
        )
        return set_refresh_cookie(response, refresh)


class AdminUsersView(AdminView):
    def get(self, request):
        users = User.objects.prefetch_related("bookmarks").order_by("-created_at", "-id")
        role = request.query_params.get("role")
        if role:
            users = users.filter(role=role)
        return Response({"users": UserSerializer(users, many=True, context={"request": request}).data})


class AdminEventsView(AdminView):
    """
    GET /api/admin/events/

    Every event, drafts included.
    """
    def get(self, request):
        events = Event.objects.select_related("organizer").order_by("-created_at", "-id")
        return Response({"events": EventSerializer(events, many=True, context={"request": request}).data})


class AdminEventDetailView(AdminView):
    def delete(self, request, pk):
        event = Event.objects.filter(pk=pk).first()
        if event is None:
            return api_error("Event not found", status.HTTP_404_NOT_FOUND)

        admin_service.delete_event(event)
        return Response({"message": "Event deleted by admin"})


class AdminEventPublishView(AdminView):
    """
    PATCH /api/admin/events/<id>/publish/

    Flips isPublished.
    """
    def patch(self, request, pk):
        event = Event.objects.select_related("organizer").filter(pk=pk).first()
        if event is None:
            return api_error("Event not found", status.HTTP_404_NOT_FOUND)

        event = admin_service.toggle_publish(event)
        state = "published" if event.is_published else "unpublished"
        logger.info("Event %s %s by admin %s", event.pk, state, request.user.pk)
        return Response({
            "message": f"Event {state} successfully",
            "event": EventSerializer(event, context={"request": request}).data,
        })


class AdminPaymentsView(AdminView):
    def get(self, request):
        payments = (
            PaymentTransaction.objects
            .select_related("event", "user", "organizer")
            .order_by("-created_at", "-id")
        )
        return Response({"payments": PaymentTransactionSerializer(payments, many=True).data})


class AdminPayoutView(AdminView):
    """
    POST /api/admin/payouts/
    Body: {"organizerId", "amount", "periodStart", "periodEnd"}
    """
    def post(self, request):
        serializer = CreatePayoutSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        organizer = User.objects.filter(pk=data["organizerId"], role=User.ROLE_ORGANIZER).first()
        if organizer is None:
            return api_error("Organizer not found", status.HTTP_404_NOT_FOUND)

        payout = admin_service.record_payout(
            organizer=organizer,
            amount=data["amount"],
            period_start=data["periodStart"],
            period_end=data["periodEnd"],
            approved_by=request.user,
        )
        return Response(
            {"message": "Payout recorded successfully", "payout": PayoutSerializer(payout).data},
            status=status.HTTP_201_CREATED,
        )


class AdminStatsView(AdminView):
    def get(self, request):
        return Response({"stats": admin_service.get_platform_stats()})
