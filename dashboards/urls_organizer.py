from django.urls import path

from .views import OrganizerEventStatsView, OrganizerEventsView

urlpatterns = [
    path("events/", OrganizerEventsView.as_view(), name="organizer-events"),
    path("events/<int:pk>/stats/", OrganizerEventStatsView.as_view(), name="organizer-event-stats"),
]
