import json
from unittest import mock

from django.core.cache import cache
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient

from core.tests.factories import make_event, make_payment, make_user
from events.models import AnalyticsEvent
from tickets.models import CheckIn, Ticket
from tickets.services import new_ticket_code
from users.models import User


class TicketIssueTests(TestCase):
    def test_code_format(self):
        code = new_ticket_code()
        self.assertRegex(code, r"^TICKET-[0-9A-F]{8}$")

    def test_issue_tickets_per_payment(self):
        organizer = make_user("host@example.com", role=User.ROLE_ORGANIZER)
        buyer = make_user("buyer@example.com")
        event = make_event(organizer)

        payment, tickets = make_payment(event, buyer, quantity=3)

        self.assertEqual(len(tickets), 3)
        self.assertEqual(len({t.ticket_code for t in tickets}), 3)
        for ticket in Ticket.objects.filter(transaction=payment):
            self.assertEqual(ticket.status, Ticket.STATUS_VALID)
            payload = json.loads(ticket.qr_payload)
            self.assertEqual(payload["ticketCode"], ticket.ticket_code)
            self.assertEqual(payload["eventId"], event.pk)
            self.assertEqual(payload["userId"], buyer.pk)
            self.assertEqual(payload["transactionId"], payment.pk)


class MyTicketsTests(TestCase):
    def setUp(self):
        cache.clear()
        self.client = APIClient()
        self.organizer = make_user("host@example.com", role=User.ROLE_ORGANIZER)
        self.buyer = make_user("buyer@example.com")
        self.stranger = make_user("stranger@example.com")
        self.event = make_event(self.organizer)
        _, self.tickets = make_payment(self.event, self.buyer, quantity=2)
        make_payment(self.event, self.stranger)

    def test_me_lists_only_own_tickets(self):
        self.client.force_authenticate(user=self.buyer)
        resp = self.client.get("/api/tickets/me/")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        tickets = resp.json()["tickets"]
        self.assertEqual(len(tickets), 2)
        self.assertEqual(tickets[0]["event"]["title"], "Jazz Night")

    def test_detail_of_someone_elses_ticket(self):
        self.client.force_authenticate(user=self.stranger)
        resp = self.client.get(f"/api/tickets/{self.tickets[0].pk}/")
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(resp.json()["message"], "Ticket not found")

    def test_qr_png(self):
        self.client.force_authenticate(user=self.buyer)
        resp = self.client.get(f"/api/tickets/{self.tickets[0].pk}/qr/")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp["Content-Type"], "image/png")
        self.assertEqual(resp["Cache-Control"], "no-store")
        self.assertTrue(resp.content.startswith(b"\x89PNG"))

    def test_requires_login(self):
        resp = self.client.get("/api/tickets/me/")
        self.assertEqual(resp.status_code, status.HTTP_401_UNAUTHORIZED)


class CheckInTests(TestCase):
    def setUp(self):
        cache.clear()
        self.client = APIClient()
        self.organizer = make_user("host@example.com", role=User.ROLE_ORGANIZER)
        self.rival = make_user("rival@example.com", role=User.ROLE_ORGANIZER)
        self.buyer = make_user("buyer@example.com")
        self.event = make_event(self.organizer)
        _, tickets = make_payment(self.event, self.buyer)
        self.ticket = tickets[0]

    def check_in(self, code=None, event_id=None, **extra):
        return self.client.post(
            "/api/checkin/",
            {
                "ticketCode": code or self.ticket.ticket_code,
                "eventId": event_id or self.event.pk,
                **extra,
            },
            format="json",
        )

    def test_concurrent_scan_loses_the_conditional_update(self):
        stale = Ticket.objects.get(pk=self.ticket.pk)
        self.client.force_authenticate(user=self.organizer)
        self.assertEqual(self.check_in().status_code, status.HTTP_200_OK)

        # Second scan read the ticket before the first one wrote
        with mock.patch("tickets.services._find_ticket", return_value=stale):
            resp = self.check_in()
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.json()["message"], "Ticket already used")
        self.assertEqual(CheckIn.objects.filter(ticket=self.ticket).count(), 1)
        self.assertEqual(
            AnalyticsEvent.objects.filter(event=self.event, type=AnalyticsEvent.TYPE_CHECKIN).count(), 1
        )

    def test_successful_check_in(self):
        self.client.force_authenticate(user=self.organizer)
        resp = self.check_in(code=self.ticket.ticket_code.lower(), location="Gate B")

        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.json()["message"], "Check-in successful")
        self.assertEqual(resp.json()["ticket"]["status"], "used")

        self.ticket.refresh_from_db()
        self.assertEqual(self.ticket.status, Ticket.STATUS_USED)
        self.assertIsNotNone(self.ticket.checked_in_at)

        checkin = CheckIn.objects.get(ticket=self.ticket)
        self.assertEqual(checkin.location, "Gate B")
        self.assertEqual(checkin.scanned_by, self.organizer)
        self.assertTrue(
            AnalyticsEvent.objects.filter(event=self.event, type=AnalyticsEvent.TYPE_CHECKIN).exists()
        )

    def test_second_scan_is_rejected(self):
        self.client.force_authenticate(user=self.organizer)
        self.check_in()
        resp = self.check_in()
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.json()["message"], "Ticket already used")
        self.assertEqual(CheckIn.objects.count(), 1)

    def test_cancelled_ticket(self):
        Ticket.objects.filter(pk=self.ticket.pk).update(status=Ticket.STATUS_CANCELLED)
        self.client.force_authenticate(user=self.organizer)
        resp = self.check_in()
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.json()["message"], "Ticket is cancelled")

    def test_default_location(self):
        self.client.force_authenticate(user=self.organizer)
        self.check_in()
        self.assertEqual(CheckIn.objects.get().location, "Main Entrance")

    def test_other_organizer(self):
        self.client.force_authenticate(user=self.rival)
        resp = self.check_in()
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(resp.json()["message"], "Unauthorized to check in for this event")

    def test_unknown_code_and_event(self):
        self.client.force_authenticate(user=self.organizer)
        resp = self.check_in(code="TICKET-00000000")
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(resp.json()["message"], "Invalid ticket")

        resp = self.check_in(event_id=9999)
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(resp.json()["message"], "Event not found")

    def test_ticket_from_another_event(self):
        other_event = make_event(self.organizer, title="Other")
        self.client.force_authenticate(user=self.organizer)
        resp = self.check_in(event_id=other_event.pk)
        self.assertEqual(resp.json()["message"], "Invalid ticket")

    def test_attendee_cannot_check_in(self):
        self.client.force_authenticate(user=self.buyer)
        resp = self.check_in()
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)
