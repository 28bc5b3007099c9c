import random
from datetime import timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.utils import timezone

from events.models import Event

User = get_user_model()


class Command(BaseCommand):
    help = "Seeds the database with sample accounts and published events"

    def add_arguments(self, parser):
        parser.add_argument("--password", default="password", help="Password for every seeded account")

    def _ensure_user(self, email, name, role, password, **extra):
        user, created = User.objects.get_or_create(
            email=email,
            defaults={"name": name, "role": role, **extra},
        )
        if created or not user.check_password(password):
            user.set_password(password)
            user.save()
        return user

    def handle(self, *args, **options):
        password = options["password"]
        self.stdout.write("Seeding data...")

        # 1. Accounts
        self._ensure_user("admin@example.com", "admin", User.ROLE_ADMIN, password, is_staff=True, is_superuser=True)
        host = self._ensure_user("host@example.com", "host", User.ROLE_ORGANIZER, password)
        alice = self._ensure_user(
            "alice@example.com", "alice", User.ROLE_USER, password,
            interests=["music", "tech"], location_lat=40.7128, location_lng=-74.0060,
        )
        bob = self._ensure_user(
            "bob@example.com", "bob", User.ROLE_USER, password,
            interests=["sports"], location_lat=34.0522, location_lng=-118.2437,
        )

        # 2. Events
        now = timezone.now()
        events_data = [
            {
                "title": "AI Revolution Summit",
                "description": "A deep dive into large language models and the future of generative AI.",
                "category": "tech",
                "city": "New York",
                "lat": 40.7128,
                "lng": -74.0060,
                "start": now + timedelta(days=5),
                "hours": 4,
                "price": Decimal("49.00"),
                "capacity": 200,
                "cover": "https://images.unsplash.com/photo-1677442136019-21780ecad995?auto=format&fit=crop&w=800&q=80",
            },
            {
                "title": "Summer Rooftop Sessions",
                "description": "Live DJ sets from local artists. <b>21+ only.</b>",
                "category": "music",
                "city": "Los Angeles",
                "lat": 34.0522,
                "lng": -118.2437,
                "start": now + timedelta(days=12),
                "hours": 6,
                "price": Decimal("25.00"),
                "capacity": 150,
                "cover": "https://images.unsplash.com/photo-1470229722913-7c0e2dbbafd3?auto=format&fit=crop&w=800&q=80",
            },
            {
                "title": "Community 5K Run",
                "description": "Free charity run along the river. Water and snacks provided.",
                "category": "sports",
                "city": "Chicago",
                "lat": 41.8781,
                "lng": -87.6298,
                "start": now + timedelta(days=2),
                "hours": 3,
                "price": Decimal("0.00"),
                "capacity": 500,
                "cover": "https://images.unsplash.com/photo-1452626038306-9aae5e071dd3?auto=format&fit=crop&w=800&q=80",
            },
        ]

        events = []
        for data in events_data:
            event, created = Event.objects.get_or_create(
                title=data["title"],
                organizer=host,
                defaults={
                    "description": data["description"],
                    "category": data["category"],
                    "city": data["city"],
                    "location_lat": data["lat"],
                    "location_lng": data["lng"],
                    "start_date": data["start"],
                    "end_date": data["start"] + timedelta(hours=data["hours"]),
                    "price": data["price"],
                    "capacity": data["capacity"],
                    "cover_image": data["cover"],
                    "is_published": True,
                },
            )
            events.append(event)
            if created:
                self.stdout.write(f"Created Event: {event.title}")

        # One draft, visible only to its organizer and admins
        Event.objects.get_or_create(
            title="Secret Launch Party",
            organizer=host,
            defaults={
                "description": "Details to follow.",
                "category": "social",
                "city": "New York",
                "location_lat": 40.7306,
                "location_lng": -73.9866,
                "start_date": now + timedelta(days=30),
                "end_date": now + timedelta(days=30, hours=5),
                "price": Decimal("15.00"),
                "capacity": 80,
            },
        )

        # 3. Bookmarks
        for user in (alice, bob):
            user.bookmarks.add(*random.sample(events, k=2))

        self.stdout.write(self.style.SUCCESS("Seeding complete"))
