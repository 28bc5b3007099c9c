from django.contrib import admin
from django.urls import path, include
from core.views import HealthCheckView
from django.conf import settings
from django.conf.urls.static import static

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/users/', include('authx.urls')),
    path('api/users/', include('users.urls')),
    path('api/events/', include('events.urls')),
    path('api/tickets/', include('tickets.urls')),
    path('api/checkin/', include('tickets.urls_checkin')),
    path('api/payments/', include('payments.urls')),
    path('api/subscriptions/', include('payments.urls_subscriptions')),
    path('api/organizer/', include('dashboards.urls_organizer')),
    path('api/admin/', include('dashboards.urls_admin')),
    path("api/health/", HealthCheckView.as_view(), name="health-check"),
]
if settings.DEBUG:
    urlpatterns += static(
        settings.MEDIA_URL,
        document_root=settings.MEDIA_ROOT
    )
