from django.core.cache import cache
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient

from core.tests.factories import make_event, make_user
from users.models import User


class ProfileTests(TestCase):
    def setUp(self):
        cache.clear()
        self.client = APIClient()
        self.user = make_user("erin@example.com", name="erin", interests=["art"])
        self.client.force_authenticate(user=self.user)

    def test_profile(self):
        organizer = make_user("host@example.com", role=User.ROLE_ORGANIZER)
        event = make_event(organizer)
        self.user.bookmarks.add(event)

        resp = self.client.get("/api/users/profile/")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        data = resp.json()["user"]
        self.assertEqual(data["email"], "erin@example.com")
        self.assertEqual(data["role"], "user")
        self.assertEqual(data["location"], {"lat": 0, "lng": 0})
        self.assertEqual(data["bookmarks"], [event.pk])
        self.assertNotIn("password", data)

    def test_partial_update(self):
        resp = self.client.put(
            "/api/users/update/",
            {"interests": "music, tech", "location": {"lat": 48.85, "lng": 2.35}},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_200_OK)

        self.user.refresh_from_db()
        self.assertEqual(self.user.interests, ["music", "tech"])
        self.assertEqual(self.user.location_lat, 48.85)
        self.assertEqual(self.user.name, "erin")

    def test_update_rejects_taken_name(self):
        make_user("frank@example.com", name="frank")
        resp = self.client.put("/api/users/update/", {"name": "frank"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)

        # Keeping your own name is fine
        resp = self.client.put("/api/users/update/", {"name": "erin"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)

    def test_role_cannot_be_set_through_update(self):
        self.client.put("/api/users/update/", {"role": "admin"}, format="json")
        self.user.refresh_from_db()
        self.assertEqual(self.user.role, User.ROLE_USER)


class UpgradeRoleTests(TestCase):
    def setUp(self):
        cache.clear()
        self.client = APIClient()

    def test_user_becomes_organizer(self):
        user = make_user("gina@example.com")
        self.client.force_authenticate(user=user)

        resp = self.client.patch("/api/users/upgrade-role/")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.json()["user"]["role"], "organizer")
        self.assertIn("accessToken", resp.json())

        user.refresh_from_db()
        self.assertEqual(user.role, User.ROLE_ORGANIZER)

        resp = self.client.patch("/api/users/upgrade-role/")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.json()["message"], "You are already an organizer")

    def test_admin_cannot_change_role(self):
        admin = make_user("root@example.com", role=User.ROLE_ADMIN)
        self.client.force_authenticate(user=admin)

        resp = self.client.patch("/api/users/upgrade-role/")
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)
        admin.refresh_from_db()
        self.assertEqual(admin.role, User.ROLE_ADMIN)
