from io import BytesIO

import qrcode
from django.http import HttpResponse
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from core.generics import api_error
from core.permissions import IsOrganizer

from .models import Ticket
from .serializers import CheckInSerializer, TicketSerializer
from .services import CheckInError, check_in_ticket


def _own_ticket(request, pk):
    # Someone else's ticket is reported as missing, not forbidden
    return (
        Ticket.objects
        .select_related("event")
        .filter(pk=pk, user=request.user)
        .first()
    )


class MyTicketsView(APIView):
    """
    GET /api/tickets/me/
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        tickets = (
            Ticket.objects
            .filter(user=request.user)
            .select_related("event")
            .order_by("-created_at", "-id")
        )
        serializer = TicketSerializer(tickets, many=True, context={"request": request})
        return Response({"tickets": serializer.data})


class TicketDetailView(APIView):
    """
    GET /api/tickets/<pk>/
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        ticket = _own_ticket(request, pk)
        if ticket is None:
            return api_error("Ticket not found", status.HTTP_404_NOT_FOUND)
        return Response({"ticket": TicketSerializer(ticket, context={"request": request}).data})


class TicketQRImageView(APIView):
    """
    GET /api/tickets/<pk>/qr/

    PNG of the ticket's QR payload, for the owner only.
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        ticket = _own_ticket(request, pk)
        if ticket is None:
            return api_error("Ticket not found", status.HTTP_404_NOT_FOUND)

        qr_img = qrcode.make(ticket.qr_payload)
        buffer = BytesIO()
        qr_img.save(buffer, format="PNG")
        buffer.seek(0)

        response = HttpResponse(buffer.getvalue(), content_type="image/png")
        response["Cache-Control"] = "no-store"
        return response


class CheckInView(APIView):
    """
    POST /api/checkin/
    Body: {"ticketCode": "...", "eventId": 1, "location": "Gate A"}
    """
    permission_classes = [IsAuthenticated, IsOrganizer]

    def post(self, request):
        serializer = CheckInSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            ticket = check_in_ticket(
                event_id=data["eventId"],
                ticket_code=data["ticketCode"],
                scanned_by=request.user,
                location=data.get("location"),
            )
        except CheckInError as exc:
            return api_error(exc.message, exc.status_code)

        return Response({
            "message": "Check-in successful",
            "ticket": TicketSerializer(ticket, context={"request": request}).data,
        })
