from .admin import (
    AdminEventDetailView,
    AdminEventPublishView,
    AdminEventsView,
    AdminExistsView,
    AdminPaymentsView,
    AdminPayoutView,
    AdminRegisterView,
    AdminStatsView,
    AdminUsersView,
)
from .organizer import OrganizerEventStatsView, OrganizerEventsView
