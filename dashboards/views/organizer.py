from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from core.generics import api_error
from core.permissions import IsOrganizer
from dashboards.serializers import OrganizerEventSerializer
from dashboards.services.organizer import get_event_stats, get_organizer_events
from events.models import Event


class OrganizerEventsView(APIView):
    """
    GET /api/organizer/events/
    """
    permission_classes = [IsAuthenticated, IsOrganizer]

    def get(self, request):
        events = get_organizer_events(request.user)
        data = OrganizerEventSerializer(events, many=True, context={"request": request}).data
        return Response({"events": data})


class OrganizerEventStatsView(APIView):
    permission_classes = [IsAuthenticated, IsOrganizer]

    def get(self, request, pk):
        # Only the owner sees stats; others get the same answer as a missing event
        event = Event.objects.filter(pk=pk, organizer=request.user).first()
        if event is None:
            return api_error("Event not found or unauthorized", status.HTTP_404_NOT_FOUND)

        return Response({
            "eventId": event.pk,
            "title": event.title,
            "stats": get_event_stats(event),
        })
