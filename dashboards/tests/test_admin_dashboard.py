from datetime import timedelta
from decimal import Decimal

from django.core.cache import cache
from django.test import TestCase, override_settings
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient

from core.tests.factories import make_event, make_payment, make_user
from events.models import Event
from payments.models import Payout
from tickets.models import Ticket
from users.models import User


class AdminBootstrapTests(TestCase):
    def setUp(self):
        cache.clear()
        self.client = APIClient()
        self.payload = {"name": "root", "email": "Root@Example.com", "password": "secret123"}

    def test_first_admin_registration(self):
        self.assertEqual(self.client.get("/api/admin/check-exists/").json(), {"exists": False})

        resp = self.client.post("/api/admin/register/", self.payload, format="json")
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        self.assertIn("accessToken", resp.json())
        self.assertEqual(resp.json()["user"]["role"], "admin")

        admin = User.objects.get(email="root@example.com")
        self.assertEqual(admin.role, User.ROLE_ADMIN)
        self.assertTrue(admin.is_superuser)

        self.assertEqual(self.client.get("/api/admin/check-exists/").json(), {"exists": True})

    def test_only_one_admin(self):
        make_user("first@example.com", role=User.ROLE_ADMIN)
        resp = self.client.post("/api/admin/register/", self.payload, format="json")
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(
            resp.json()["message"],
            "An admin account already exists. Only one admin is allowed.",
        )

    def test_existing_email(self):
        make_user("root@example.com", name="taken")
        resp = self.client.post("/api/admin/register/", self.payload, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)


@override_settings(PLATFORM_FEE_PERCENT="5")
class AdminDashboardTests(TestCase):
    def setUp(self):
        cache.clear()
        self.client = APIClient()
        self.admin = make_user("admin@example.com", role=User.ROLE_ADMIN)
        self.organizer = make_user("host@example.com", role=User.ROLE_ORGANIZER)
        self.buyer = make_user("buyer@example.com")
        self.event = make_event(self.organizer, is_published=False)
        self.client.force_authenticate(user=self.admin)

    def test_non_admin_is_refused(self):
        self.client.force_authenticate(user=self.organizer)
        for url in ("/api/admin/users/", "/api/admin/events/", "/api/admin/payments/", "/api/admin/stats/"):
            self.assertEqual(self.client.get(url).status_code, status.HTTP_403_FORBIDDEN)

    def test_users_and_events_lists(self):
        users = self.client.get("/api/admin/users/").json()["users"]
        self.assertEqual(len(users), 3)

        organizers = self.client.get("/api/admin/users/", {"role": "organizer"}).json()["users"]
        self.assertEqual([u["email"] for u in organizers], ["host@example.com"])

        # Drafts included
        events = self.client.get("/api/admin/events/").json()["events"]
        self.assertEqual([e["id"] for e in events], [self.event.pk])

    def test_publish_toggle(self):
        url = f"/api/admin/events/{self.event.pk}/publish/"
        resp = self.client.patch(url)
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.json()["message"], "Event published successfully")
        self.event.refresh_from_db()
        self.assertTrue(self.event.is_published)

        resp = self.client.patch(url)
        self.assertEqual(resp.json()["message"], "Event unpublished successfully")

    def test_delete_cascades_tickets(self):
        payment, _ = make_payment(self.event, self.buyer, quantity=2)

        resp = self.client.delete(f"/api/admin/events/{self.event.pk}/")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.json()["message"], "Event deleted by admin")
        self.assertFalse(Event.objects.filter(pk=self.event.pk).exists())
        self.assertFalse(Ticket.objects.exists())

        # Money records survive
        payment.refresh_from_db()
        self.assertIsNone(payment.event_id)

    def test_delete_missing_event(self):
        resp = self.client.delete("/api/admin/events/9999/")
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)

    def test_payments_list(self):
        make_payment(self.event, self.buyer, quantity=1, intent_id="pi_listed")
        payments = self.client.get("/api/admin/payments/").json()["payments"]
        self.assertEqual(payments[0]["paymentIntentId"], "pi_listed")

    def test_record_payout(self):
        start = timezone.now() - timedelta(days=30)
        payload = {
            "organizerId": self.organizer.pk,
            "amount": "95.00",
            "periodStart": start.isoformat(),
            "periodEnd": timezone.now().isoformat(),
        }
        resp = self.client.post("/api/admin/payouts/", payload, format="json")
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)

        payout = Payout.objects.get()
        self.assertEqual(payout.status, Payout.STATUS_PAID)
        self.assertEqual(payout.amount, Decimal("95.00"))
        self.assertEqual(payout.approved_by, self.admin)
        self.assertIsNotNone(payout.paid_at)

    def test_payout_to_non_organizer(self):
        payload = {
            "organizerId": self.buyer.pk,
            "amount": "10.00",
            "periodStart": (timezone.now() - timedelta(days=1)).isoformat(),
            "periodEnd": timezone.now().isoformat(),
        }
        resp = self.client.post("/api/admin/payouts/", payload, format="json")
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)
        self.assertFalse(Payout.objects.exists())

    def test_stats(self):
        self.event.is_published = True
        self.event.save()
        make_payment(self.event, self.buyer, quantity=2)

        stats = self.client.get("/api/admin/stats/").data["stats"]
        self.assertEqual(stats["users"], 3)
        self.assertEqual(stats["organizers"], 1)
        self.assertEqual(stats["publishedEvents"], 1)
        self.assertEqual(stats["ticketsSold"], 2)
        self.assertEqual(stats["grossRevenue"], Decimal("20.00"))
        self.assertEqual(stats["platformFees"], Decimal("1.00"))
