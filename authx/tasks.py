# authx/tasks.py
import logging

from celery import shared_task

from .otp import purge_expired

logger = logging.getLogger("spot.auth")


@shared_task
def purge_expired_signups():
    """
    Periodic cleanup of expired OTPs and staged signups.
    Expiry is already enforced on read; this only keeps the tables small.
    """
    otps, pending = purge_expired()
    if otps or pending:
        logger.info("Purged %s expired OTPs and %s pending signups", otps, pending)
    return {"otps": otps, "pending_users": pending}
