# users/urls.py
from django.urls import path

from .views import (
    OAuthCallbackView,
    OAuthStartView,
    ProfileView,
    UpdateProfileView,
    UpgradeRoleView,
)

urlpatterns = [
    path("profile/", ProfileView.as_view(), name="user-profile"),
    path("update/", UpdateProfileView.as_view(), name="user-update"),
    path("upgrade-role/", UpgradeRoleView.as_view(), name="user-upgrade-role"),
    path("auth/<str:provider>/", OAuthStartView.as_view(), name="oauth-start"),
    path("auth/<str:provider>/callback/", OAuthCallbackView.as_view(), name="oauth-callback"),
]
