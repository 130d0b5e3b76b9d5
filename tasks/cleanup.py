import logging

from celery import shared_task

from services.sweeper import purge_expired_bookings

logger = logging.getLogger(__name__)


@shared_task(name="bookings.purge_expired")
def purge_expired() -> int:
    removed = purge_expired_bookings()
    logger.info("Expiry sweep finished, %s booking(s) removed", removed)
    return removed
