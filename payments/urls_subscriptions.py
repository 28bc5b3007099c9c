from django.urls import path

from .views import CreateSubscriptionView, MySubscriptionView

urlpatterns = [
    path("create/", CreateSubscriptionView.as_view(), name="subscription-create"),
    path("me/", MySubscriptionView.as_view(), name="subscription-me"),
]
