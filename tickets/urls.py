from django.urls import path

from .views import MyTicketsView, TicketDetailView, TicketQRImageView

urlpatterns = [
    path("me/", MyTicketsView.as_view(), name="my-tickets"),
    path("<int:pk>/", TicketDetailView.as_view(), name="ticket-detail"),
    path("<int:pk>/qr/", TicketQRImageView.as_view(), name="ticket-qr"),
]
