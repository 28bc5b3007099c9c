from django.core.management.base import BaseCommand

from authx.otp import purge_expired


class Command(BaseCommand):
    help = "Deletes expired one-time codes and pending signups"

    def handle(self, *args, **options):
        otps, pending = purge_expired()
        self.stdout.write(
            self.style.SUCCESS(f"Removed {otps} expired OTPs and {pending} pending signups.")
        )
