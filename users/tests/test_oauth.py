from unittest import mock
from urllib.parse import parse_qs, urlparse

from django.conf import settings
from django.core.cache import cache
from django.test import TestCase, override_settings
from rest_framework import status
from rest_framework.test import APIClient

from core.tests.factories import make_user
from users.models import User


def fake_response(status_code=200, payload=None):
    return mock.Mock(status_code=status_code, json=mock.Mock(return_value=payload or {}))


GOOGLE_INFO = {
    "sub": "g-123",
    "email": "New.Person@Example.com",
    "name": "New Person",
    "picture": "https://lh3.googleusercontent.com/avatar.png",
}


@override_settings(FRONTEND_URL="http://frontend.test", GOOGLE_CLIENT_ID="client-id")
class OAuthTests(TestCase):
    def setUp(self):
        cache.clear()
        self.client = APIClient()

    def google_callback(self, info=GOOGLE_INFO, state="user"):
        with mock.patch("users.oauth.requests.post", return_value=fake_response(payload={"id_token": "tok"})), \
                mock.patch("users.oauth.id_token.verify_oauth2_token", return_value=info) as verify:
            resp = self.client.get("/api/users/auth/google/callback/", {"code": "abc", "state": state})
        return resp, verify

    def test_start_redirects_with_role_in_state(self):
        resp = self.client.get("/api/users/auth/google/", {"role": "organizer"})
        self.assertEqual(resp.status_code, status.HTTP_302_FOUND)
        query = parse_qs(urlparse(resp["Location"]).query)
        self.assertEqual(query["state"], ["organizer"])
        self.assertEqual(query["client_id"], ["client-id"])

    def test_unknown_provider(self):
        resp = self.client.get("/api/users/auth/myspace/")
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)

    def test_google_creates_account(self):
        resp, verify = self.google_callback(state="organizer")

        self.assertEqual(resp.status_code, status.HTTP_302_FOUND)
        self.assertTrue(resp["Location"].startswith("http://frontend.test?accessToken="))
        self.assertIn(settings.REFRESH_COOKIE_NAME, resp.cookies)
        self.assertEqual(verify.call_args[0][0], "tok")

        user = User.objects.get(email="new.person@example.com")
        self.assertEqual(user.google_id, "g-123")
        self.assertEqual(user.role, User.ROLE_ORGANIZER)
        self.assertFalse(user.has_usable_password())
        self.assertEqual(user.profile_image, GOOGLE_INFO["picture"])

    def test_google_links_existing_email(self):
        existing = make_user("new.person@example.com", name="np")
        self.google_callback()

        existing.refresh_from_db()
        self.assertEqual(existing.google_id, "g-123")
        self.assertEqual(User.objects.count(), 1)

    def test_name_collision_gets_suffix(self):
        make_user("someone@example.com", name="New Person")
        self.google_callback()
        self.assertEqual(User.objects.get(google_id="g-123").name, "New Person2")

    def test_missing_code(self):
        resp = self.client.get("/api/users/auth/google/callback/")
        self.assertEqual(resp["Location"], "http://frontend.test/login?error=auth_failed")

    def test_rejected_token_exchange(self):
        with mock.patch("users.oauth.requests.post", return_value=fake_response(400)):
            resp = self.client.get("/api/users/auth/google/callback/", {"code": "bad"})
        self.assertEqual(resp["Location"], "http://frontend.test/login?error=auth_failed")

    def test_github_uses_primary_verified_email(self):
        token = fake_response(payload={"access_token": "gh-token"})
        profile = fake_response(payload={"id": 42, "login": "octo", "email": None, "avatar_url": ""})
        emails = fake_response(payload=[
            {"email": "unverified@example.com", "verified": False, "primary": False},
            {"email": "octo@example.com", "verified": True, "primary": True},
        ])
        with mock.patch("users.oauth.requests.post", return_value=token), \
                mock.patch("users.oauth.requests.get", side_effect=[profile, emails]):
            resp = self.client.get("/api/users/auth/github/callback/", {"code": "abc"})

        self.assertEqual(resp.status_code, status.HTTP_302_FOUND)
        user = User.objects.get(github_id="42")
        self.assertEqual(user.email, "octo@example.com")
        self.assertEqual(user.name, "octo")
        self.assertEqual(user.role, User.ROLE_USER)
