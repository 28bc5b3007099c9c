import logging
import time

from django.conf import settings
from django.core.cache import cache
from django.db import connections
from django.db.utils import OperationalError
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

logger = logging.getLogger("spot.api")


def _database_ok() -> bool:
    try:
        with connections["default"].cursor() as cursor:
            cursor.execute("SELECT 1")
    except OperationalError as exc:
        logger.error("Health check: database unreachable: %s", exc)
        return False
    return True


def _cache_ok() -> bool:
    # Throttle counters live in the cache; a dead cache means no rate limiting
    try:
        cache.set("spot:health", "1", timeout=5)
        return cache.get("spot:health") == "1"
    except Exception as exc:
        logger.error("Health check: cache unreachable: %s", exc)
        return False


class HealthCheckView(APIView):
    """
    GET /api/health/

    Uptime check: database and cache reachability plus whether the
    payment gateway is configured. Never throttled.
    """
    permission_classes = [AllowAny]
    authentication_classes = []
    throttle_classes = []

    def get(self, request):
        started = time.perf_counter()
        db_ok = _database_ok()
        cache_ok = _cache_ok()

        return Response({
            "status": "ok" if db_ok and cache_ok else "degraded",
            "db": db_ok,
            "cache": cache_ok,
            "payments": bool(settings.STRIPE_SECRET_KEY),
            "env": settings.ENV,
            "latency_ms": int((time.perf_counter() - started) * 1000),
        })
