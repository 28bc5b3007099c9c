from django.urls import path

from .views import CheckInView

urlpatterns = [
    path("", CheckInView.as_view(), name="checkin"),
]
