import re
from datetime import timedelta
from unittest import mock

from django.conf import settings
from django.core import mail
from django.core.cache import cache
from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import AccessToken

from authx.otp import consume_otp, latest_otp
from authx.tasks import purge_expired_signups
from core.tests.factories import make_user
from users.models import OneTimePassword, PendingUser, User


def code_from_mail(message):
    return re.search(r"\b(\d{6})\b", message.body).group(1)


class SignupTests(TestCase):
    def setUp(self):
        cache.clear()
        self.client = APIClient()
        self.payload = {
            "name": "alice",
            "email": "Alice@Example.com",
            "password": "secret123",
            "role": "organizer",
            "interests": ["music", "tech"],
        }

    def register(self, **overrides):
        return self.client.post("/api/users/register/", {**self.payload, **overrides}, format="json")

    def verify(self, otp, email="alice@example.com"):
        return self.client.post("/api/users/verify-otp/", {"email": email, "otp": otp}, format="json")

    def test_register_stages_signup_and_mails_code(self):
        resp = self.register()
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.json()["message"], "OTP sent to your email")

        self.assertFalse(User.objects.filter(email="alice@example.com").exists())
        pending = PendingUser.objects.get(email="alice@example.com")
        self.assertEqual(pending.role, User.ROLE_ORGANIZER)
        self.assertNotEqual(pending.password, "secret123")

        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, ["alice@example.com"])
        self.assertEqual(mail.outbox[0].subject, "Verify your email - Spot")

        # Only the hash is stored
        code = code_from_mail(mail.outbox[0])
        otp = OneTimePassword.objects.get(email="alice@example.com")
        self.assertNotEqual(otp.code_hash, code)

    def test_register_rejects_existing_email_and_name(self):
        make_user("alice@example.com", name="someone")
        resp = self.register()
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.json()["message"], "User already exists")

        resp = self.register(email="other@example.com", name="someone")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.json()["message"], "Name is already taken")

    def test_register_mail_failure_is_server_error(self):
        with mock.patch("authx.views.send_otp_email", side_effect=OSError("smtp down")):
            resp = self.register()
        self.assertEqual(resp.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(resp.json()["message"], "Server error")

    def test_verify_creates_user_and_session(self):
        self.register()
        code = code_from_mail(mail.outbox[0])

        resp = self.verify("000000" if code != "000000" else "111111")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.json()["message"], "Invalid OTP")

        resp = self.verify(code)
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        data = resp.json()
        self.assertIn("accessToken", data)
        self.assertEqual(data["user"]["role"], User.ROLE_ORGANIZER)
        self.assertIn(settings.REFRESH_COOKIE_NAME, resp.cookies)
        self.assertTrue(resp.cookies[settings.REFRESH_COOKIE_NAME]["httponly"])

        user = User.objects.get(email="alice@example.com")
        self.assertTrue(user.check_password("secret123"))
        self.assertEqual(user.interests, ["music", "tech"])
        self.assertFalse(PendingUser.objects.filter(email="alice@example.com").exists())
        self.assertFalse(OneTimePassword.objects.filter(email="alice@example.com").exists())

        # The code cannot be used twice
        resp = self.verify(code)
        self.assertEqual(resp.json()["message"], "OTP expired or not found")

    def test_only_newest_code_is_accepted(self):
        with mock.patch("authx.otp.generate_code", side_effect=["111111", "222222"]):
            self.register()
            resp = self.client.post(
                "/api/users/resend-otp/",
                {"email": "alice@example.com", "purpose": "signup"},
                format="json",
            )
        self.assertEqual(resp.status_code, status.HTTP_200_OK)

        self.assertEqual(self.verify("111111").json()["message"], "Invalid OTP")
        self.assertEqual(self.verify("222222").status_code, status.HTTP_201_CREATED)

    def test_expired_code(self):
        self.register()
        code = code_from_mail(mail.outbox[0])
        OneTimePassword.objects.update(created_at=timezone.now() - timedelta(minutes=11))

        resp = self.verify(code)
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.json()["message"], "OTP expired or not found")

    def test_expired_pending_signup(self):
        self.register()
        code = code_from_mail(mail.outbox[0])
        PendingUser.objects.update(created_at=timezone.now() - timedelta(minutes=16))

        resp = self.verify(code)
        self.assertEqual(resp.json()["message"], "Signup session expired. Please register again")

    def test_code_consumed_between_check_and_use(self):
        with mock.patch("authx.otp.generate_code", return_value="123456"):
            self.register()
        stale = latest_otp("alice@example.com", OneTimePassword.PURPOSE_SIGNUP)
        OneTimePassword.objects.filter(pk=stale.pk).delete()

        with mock.patch("authx.views.latest_otp", return_value=stale):
            resp = self.verify("123456")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.json()["message"], "OTP expired or not found")
        self.assertFalse(User.objects.filter(email="alice@example.com").exists())

    def test_consume_otp_only_once(self):
        self.register()
        otp = OneTimePassword.objects.get(email="alice@example.com")
        self.assertTrue(consume_otp(otp))
        self.assertFalse(consume_otp(otp))

    def test_resend_without_pending_signup(self):
        resp = self.client.post("/api/users/resend-otp/", {"email": "nobody@example.com"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)


class SessionTests(TestCase):
    def setUp(self):
        cache.clear()
        self.client = APIClient()
        self.user = make_user("bob@example.com", password="secret123")

    def login(self, password="secret123"):
        return self.client.post(
            "/api/users/login/",
            {"email": "BOB@example.com", "password": password},
            format="json",
        )

    def test_login(self):
        resp = self.login()
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.json()["message"], "Logged in successfully")
        self.assertIn("accessToken", resp.json())

        self.user.refresh_from_db()
        self.assertEqual(self.user.refresh_token, resp.cookies[settings.REFRESH_COOKIE_NAME].value)

    def test_wrong_password_and_unknown_email_look_the_same(self):
        resp = self.login(password="nope")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.json()["message"], "Invalid credentials")

        resp = self.client.post(
            "/api/users/login/",
            {"email": "ghost@example.com", "password": "secret123"},
            format="json",
        )
        self.assertEqual(resp.json()["message"], "Invalid credentials")

    def test_refresh_with_cookie(self):
        self.login()
        resp = self.client.post("/api/users/refresh/")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertIn("accessToken", resp.json())

    def test_refresh_without_cookie(self):
        resp = self.client.post("/api/users/refresh/")
        self.assertEqual(resp.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(resp.json()["message"], "Unauthorized")

    def test_new_login_replaces_old_refresh_token(self):
        first = self.login().cookies[settings.REFRESH_COOKIE_NAME].value
        self.login()

        self.client.cookies[settings.REFRESH_COOKIE_NAME] = first
        resp = self.client.post("/api/users/refresh/")
        self.assertEqual(resp.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_logout_revokes_refresh_token(self):
        token = self.login().cookies[settings.REFRESH_COOKIE_NAME].value
        resp = self.client.post("/api/users/logout/")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)

        self.user.refresh_from_db()
        self.assertIsNone(self.user.refresh_token)

        self.client.cookies[settings.REFRESH_COOKIE_NAME] = token
        resp = self.client.post("/api/users/refresh/")
        self.assertEqual(resp.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_logout_with_expired_access_token(self):
        self.login()
        access = AccessToken.for_user(self.user)
        access.set_exp(lifetime=-timedelta(minutes=1))
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {access}")

        resp = self.client.post("/api/users/logout/")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)

        self.user.refresh_from_db()
        self.assertIsNone(self.user.refresh_token)

    def test_logout_with_bearer_only(self):
        self.login()
        self.client.cookies.clear()
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {AccessToken.for_user(self.user)}")

        resp = self.client.post("/api/users/logout/")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)

        self.user.refresh_from_db()
        self.assertIsNone(self.user.refresh_token)


class PasswordResetTests(TestCase):
    def setUp(self):
        cache.clear()
        self.client = APIClient()
        self.user = make_user("carol@example.com", password="secret123")

    def test_unknown_email_gets_generic_answer(self):
        resp = self.client.post("/api/users/forgot-password/", {"email": "nobody@example.com"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(len(mail.outbox), 0)

    def test_social_only_account(self):
        make_user("social@example.com", password=None)
        resp = self.client.post("/api/users/forgot-password/", {"email": "social@example.com"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.json()["message"], "This account uses social login")

    def test_reset_flow(self):
        resp = self.client.post("/api/users/forgot-password/", {"email": "carol@example.com"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(mail.outbox[0].subject, "Reset your password - Spot")
        code = code_from_mail(mail.outbox[0])

        self.user.refresh_token = "old-session"
        self.user.save(update_fields=["refresh_token"])

        resp = self.client.post(
            "/api/users/reset-password/",
            {"email": "carol@example.com", "otp": code, "newPassword": "brandnew1"},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.json()["message"], "Password reset successfully")

        self.user.refresh_from_db()
        self.assertTrue(self.user.check_password("brandnew1"))
        self.assertIsNone(self.user.refresh_token)

        resp = self.client.post(
            "/api/users/reset-password/",
            {"email": "carol@example.com", "otp": code, "newPassword": "another1"},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)

    def test_signup_code_does_not_reset_password(self):
        with mock.patch("authx.otp.generate_code", return_value="123456"):
            self.client.post("/api/users/register/", {
                "name": "dave", "email": "dave@example.com", "password": "secret123",
            }, format="json")
        make_user("dave@example.com", name="dave2")

        resp = self.client.post(
            "/api/users/reset-password/",
            {"email": "dave@example.com", "otp": "123456", "newPassword": "brandnew1"},
            format="json",
        )
        self.assertEqual(resp.json()["message"], "OTP expired or not found")


class PurgeTaskTests(TestCase):
    def test_purge_removes_only_expired_rows(self):
        old = timezone.now() - timedelta(hours=1)
        OneTimePassword.objects.create(email="a@example.com", purpose="signup", code_hash="x", created_at=old)
        OneTimePassword.objects.create(email="b@example.com", purpose="signup", code_hash="x")
        PendingUser.objects.create(name="a", email="a@example.com", password="x", created_at=old)
        PendingUser.objects.create(name="b", email="b@example.com", password="x")

        result = purge_expired_signups()

        self.assertEqual(result, {"otps": 1, "pending_users": 1})
        self.assertEqual(OneTimePassword.objects.count(), 1)
        self.assertEqual(PendingUser.objects.count(), 1)
