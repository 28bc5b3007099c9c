import logging
import math

from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from core.generics import api_error
from core.media import MediaUploadError, delete_image, replace_image, upload_image
from core.permissions import IsOrganizer
from events.models import AnalyticsEvent, Event
from events.policies import can_modify_event, has_active_tickets
from events.serializers import EventSerializer, EventWriteSerializer

logger = logging.getLogger("spot.events")

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 50
COVER_FOLDER = "events"


def _positive_int(raw, default):
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return default
    return value if value > 0 else default


class EventListCreateView(APIView):
    """
    GET  /api/events/   public, published only
    POST /api/events/   organizer or admin, created unpublished
    """

    def get_permissions(self):
        if self.request.method == "POST":
            return [IsAuthenticated(), IsOrganizer()]
        return [AllowAny()]

    def get(self, request):
        page = _positive_int(request.query_params.get("page"), 1)
        limit = min(_positive_int(request.query_params.get("limit"), DEFAULT_PAGE_SIZE), MAX_PAGE_SIZE)

        qs = (
            Event.objects
            .filter(is_published=True)
            .select_related("organizer")
            .order_by("-start_date", "-id")
        )
        total = qs.count()
        offset = (page - 1) * limit

        serializer = EventSerializer(qs[offset:offset + limit], many=True, context={"request": request})
        return Response({
            "events": serializer.data,
            "pagination": {
                "total": total,
                "page": page,
                "limit": limit,
                "pages": math.ceil(total / limit),
            },
        })

    def post(self, request):
        serializer = EventWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        cover = serializer.validated_data.pop("coverImage", None)
        cover_name = None
        if cover is not None:
            try:
                cover_name = upload_image(cover, COVER_FOLDER)
            except MediaUploadError:
                return api_error("Failed to upload cover image", status.HTTP_500_INTERNAL_SERVER_ERROR)

        event = serializer.save(organizer=request.user, cover_image=cover_name)
        logger.info("Event %s created by user %s", event.pk, request.user.pk)

        return Response(
            {
                "message": "Event created successfully",
                "event": EventSerializer(event, context={"request": request}).data,
            },
            status=status.HTTP_201_CREATED,
        )


class EventDetailView(APIView):
    """
    GET    /api/events/<pk>/   public (records a view)
    PUT    /api/events/<pk>/   owner or admin, before the event starts
    DELETE /api/events/<pk>/   owner or admin, while no ticket is valid/used
    """

    def get_permissions(self):
        if self.request.method in ("PUT", "DELETE"):
            return [IsAuthenticated()]
        return [AllowAny()]

    def get_object(self, pk):
        try:
            return Event.objects.select_related("organizer").get(pk=pk)
        except Event.DoesNotExist:
            return None

    def get(self, request, pk):
        event = self.get_object(pk)
        # Drafts are only visible to whoever can edit them
        if event is None or (not event.is_published and not can_modify_event(request.user, event)):
            return api_error("Event not found", status.HTTP_404_NOT_FOUND)

        AnalyticsEvent.objects.create(
            event=event,
            type=AnalyticsEvent.TYPE_VIEW,
            user=request.user if request.user.is_authenticated else None,
        )

        return Response({"event": EventSerializer(event, context={"request": request}).data})

    def put(self, request, pk):
        event = self.get_object(pk)
        if event is None:
            return api_error("Event not found", status.HTTP_404_NOT_FOUND)

        if not can_modify_event(request.user, event):
            return api_error("You are not authorized to update this event", status.HTTP_403_FORBIDDEN)

        if event.has_started():
            return api_error("Cannot update past or ongoing events")

        serializer = EventWriteSerializer(event, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        extra = {}
        cover = serializer.validated_data.pop("coverImage", None)
        if cover is not None:
            try:
                extra["cover_image"] = replace_image(event.cover_image, cover, COVER_FOLDER)
            except MediaUploadError:
                return api_error("Failed to upload new cover image", status.HTTP_500_INTERNAL_SERVER_ERROR)

        event = serializer.save(**extra)
        logger.info("Event %s updated by user %s", event.pk, request.user.pk)

        return Response({
            "message": "Event updated successfully",
            "event": EventSerializer(event, context={"request": request}).data,
        })

    def delete(self, request, pk):
        event = self.get_object(pk)
        if event is None:
            return api_error("Event not found", status.HTTP_404_NOT_FOUND)

        if not can_modify_event(request.user, event):
            return api_error("You are not authorized to delete this event", status.HTTP_403_FORBIDDEN)

        if has_active_tickets(event):
            return api_error("Cannot delete event with active or used tickets.")

        cover = event.cover_image
        event.delete()
        try:
            delete_image(cover)
        except Exception as exc:
            logger.warning("Could not delete cover image %s: %s", cover, exc)

        logger.info("Event %s deleted by user %s", pk, request.user.pk)
        return Response({"message": "Event deleted successfully"})
