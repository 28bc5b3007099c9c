from django.core.cache import cache
from django.core.exceptions import ImproperlyConfigured
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient

from core.generics import user_is_admin
from core.tests.factories import make_user
from core.throttles import AuthIPThrottle
from users.models import User


class ThrottleRateTests(TestCase):
    def test_windowed_rate(self):
        throttle = AuthIPThrottle()
        self.assertEqual(throttle.parse_rate("200/15m"), (200, 900))
        self.assertEqual(throttle.parse_rate("10/1h"), (10, 3600))

    def test_plain_drf_rate_still_works(self):
        throttle = AuthIPThrottle()
        self.assertEqual(throttle.parse_rate("100/minute"), (100, 60))
        self.assertEqual(throttle.parse_rate("5/day"), (5, 86400))

    def test_invalid_rate(self):
        with self.assertRaises(ImproperlyConfigured):
            AuthIPThrottle().parse_rate("lots")


class CoreApiTests(TestCase):
    def setUp(self):
        cache.clear()
        self.client = APIClient()

    def test_health(self):
        resp = self.client.get("/api/health/")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        data = resp.json()
        self.assertEqual(data["status"], "ok")
        self.assertTrue(data["db"])
        self.assertTrue(data["cache"])

    def test_raised_errors_are_wrapped(self):
        resp = self.client.get("/api/users/profile/")
        self.assertEqual(resp.status_code, status.HTTP_401_UNAUTHORIZED)
        data = resp.json()
        self.assertFalse(data["success"])
        self.assertEqual(data["status_code"], 401)
        self.assertIn("detail", data["errors"])

    def test_role_guard_names_the_role(self):
        user = make_user("plain@example.com")
        self.client.force_authenticate(user=user)
        resp = self.client.post("/api/events/", {}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)
        self.assertIn("Role 'user'", resp.json()["errors"]["detail"])

    def test_superuser_counts_as_admin(self):
        root = User.objects.create_superuser(email="root@example.com", password="secret123", name="root")
        self.assertTrue(user_is_admin(root))
        self.assertFalse(user_is_admin(make_user("someone@example.com")))
