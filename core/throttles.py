# core/throttles.py

import re

from django.core.exceptions import ImproperlyConfigured
from rest_framework.throttling import SimpleRateThrottle


RATE_PATTERN = re.compile(r"^(?P<num>\d+)/(?P<count>\d*)(?P<unit>[smhd])\w*$")
UNIT_SECONDS = {"s": 1, "m": 60, "h": 3600, "d": 86400}


class IPRateThrottle(SimpleRateThrottle):
    """
    Per-IP throttle whose rate accepts a window multiplier.

    DRF only understands "<n>/<unit>"; we also need "200/15m"
    (200 requests per 15 minutes). Plain "100/minute" keeps working.

    Cache key shape:
      throttle_<scope>_<ip>
    """

    def parse_rate(self, rate):
        if rate is None:
            return (None, None)

        match = RATE_PATTERN.match(rate.strip())
        if not match:
            raise ImproperlyConfigured(f"Invalid throttle rate for scope '{self.scope}': {rate!r}")

        num_requests = int(match.group("num"))
        count = int(match.group("count") or 1)
        return (num_requests, count * UNIT_SECONDS[match.group("unit")])

    def get_cache_key(self, request, view):
        return self.cache_format % {
            "scope": self.scope,
            "ident": self.get_ident(request),
        }


class GlobalIPThrottle(IPRateThrottle):
    scope = "global"


class AuthIPThrottle(IPRateThrottle):
    """Login / signup / OTP / refresh endpoints."""
    scope = "auth"


class PaymentIPThrottle(IPRateThrottle):
    """Order creation and gateway callbacks."""
    scope = "payments"


AUTH_THROTTLES = [GlobalIPThrottle, AuthIPThrottle]
PAYMENT_THROTTLES = [GlobalIPThrottle, PaymentIPThrottle]
