import logging
from datetime import datetime

from models.booking import Booking
from services.store import unit_of_work
from utils.audit import log_event

logger = logging.getLogger(__name__)


def purge_expired_bookings(now=None) -> int:
    """Delete every booking whose appointment date has passed.

    Transactions are left in place as ledger history. Returns the number of
    bookings removed.
    """
    now = now or datetime.utcnow()

    with unit_of_work("purge expired bookings"):
        removed = (
            Booking.query
            .filter(Booking.appt_date < now)
            .delete(synchronize_session=False)
        )

    logger.info("Expired bookings removed: %s", removed)
    if removed:
        log_event("BOOKINGS_EXPIRED", entity="booking", metadata={"removed": removed, "cutoff": now.isoformat()})
    return removed
