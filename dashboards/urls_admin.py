from django.urls import path

from .views import (
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

urlpatterns = [
    path("check-exists/", AdminExistsView.as_view(), name="admin-check-exists"),
    path("register/", AdminRegisterView.as_view(), name="admin-register"),
    path("users/", AdminUsersView.as_view(), name="admin-users"),
    path("events/", AdminEventsView.as_view(), name="admin-events"),
    path("events/<int:pk>/", AdminEventDetailView.as_view(), name="admin-event-detail"),
    path("events/<int:pk>/publish/", AdminEventPublishView.as_view(), name="admin-event-publish"),
    path("payments/", AdminPaymentsView.as_view(), name="admin-payments"),
    path("payouts/", AdminPayoutView.as_view(), name="admin-payouts"),
    path("stats/", AdminStatsView.as_view(), name="admin-stats"),
]
