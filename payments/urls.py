from django.urls import path

from .views import CreateOrderView, StripeWebhookView

urlpatterns = [
    path("create-order/", CreateOrderView.as_view(), name="payment-create-order"),
    path("verify/", StripeWebhookView.as_view(), name="payment-verify"),
    path("webhook/", StripeWebhookView.as_view(), name="payment-webhook"),
]
