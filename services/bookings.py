"""
Booking engine.

A booking is only ever created together with its ledger transaction, in a
single commit. All validation and business-rule checks run before anything
is written, in this order: campground exists, payment method given, date not
in the past, quota not exhausted, payment method usable by the caller.
"""

from datetime import datetime, timezone

from flask import current_app

from models import db
from models.booking import Booking
from models.campground import Campground
from models.payment_method import PaymentMethod
from models.transaction import Transaction
from models.user import User
from security.principal import Principal
from services.errors import (
    BookingLimitReached,
    CampgroundNotFound,
    NotAuthorized,
    NotFound,
    PastDate,
    PaymentMethodRequired,
    ValidationError,
)
from services.store import unit_of_work
from utils.audit import log_event

DEFAULT_BOOKING_LIMIT = 3


def parse_appt_date(value) -> datetime:
    """Accept a datetime or an ISO 8601 string; return naive UTC."""
    if value is None or value == "":
        raise ValidationError("Please add an appointment date (apptDate)")

    if isinstance(value, datetime):
        appt = value
    elif isinstance(value, str):
        try:
            appt = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            raise ValidationError("Invalid apptDate. Use ISO format e.g. 2026-01-20T18:00:00Z")
    else:
        raise ValidationError("Invalid apptDate. Use ISO format e.g. 2026-01-20T18:00:00Z")

    if appt.tzinfo is not None:
        appt = appt.astimezone(timezone.utc).replace(tzinfo=None)
    return appt


def is_past(appt_date: datetime, now: datetime) -> bool:
    # second-level wall clock comparison
    return appt_date.replace(microsecond=0) < now.replace(microsecond=0)


def _coerce_id(value, field: str) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be an id")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be an id")


def booking_limit() -> int:
    return current_app.config.get("BOOKING_LIMIT_PER_USER", DEFAULT_BOOKING_LIMIT)


def _count_bookings_locked(user_id: int) -> int:
    # Row lock on the owner serialises concurrent bookings by the same user
    # on backends that support FOR UPDATE; elsewhere it is a plain read.
    db.session.query(User).filter(User.id == user_id).with_for_update().one_or_none()
    return Booking.query.filter_by(user_id=user_id).count()


def _usable_payment_method(principal: Principal, payment_method_id: int) -> PaymentMethod:
    method = db.session.get(PaymentMethod, payment_method_id)
    if method is None or (method.user_id != principal.user_id and not principal.is_admin):
        raise NotFound(f"No payment method with the id of {payment_method_id}")
    return method


def _load_visible(principal: Principal, booking_id: int) -> Booking:
    booking = db.session.get(Booking, booking_id)
    if booking is None or (booking.user_id != principal.user_id and not principal.is_admin):
        raise NotFound(f"No Booking with the id of {booking_id}")
    return booking


def _load_for_change(principal: Principal, booking_id: int, verb: str) -> Booking:
    booking = db.session.get(Booking, booking_id)
    if booking is None:
        raise NotFound(f"No Booking with the id of {booking_id}")
    if booking.user_id != principal.user_id and not principal.is_admin:
        raise NotAuthorized(f"User {principal.user_id} is not authorized to {verb} this booking")
    return booking


def list_bookings(principal: Principal, campground_id=None):
    """Admins see everything (optionally for one campground); users only their own."""
    q = Booking.query
    if not principal.is_admin:
        q = q.filter_by(user_id=principal.user_id)
    elif campground_id is not None:
        q = q.filter_by(campground_id=campground_id)
    return q.order_by(Booking.appt_date.asc(), Booking.id.asc()).all()


def get_booking(principal: Principal, booking_id: int) -> Booking:
    return _load_visible(principal, booking_id)


def create_booking(principal: Principal, campground_id: int, appt_date, payment_method_id, now=None):
    """Create a booking and its paired transaction.

    Returns ``(booking, transaction)``. ``amount`` is the campground's price
    at the moment of booking.
    """
    campground = db.session.get(Campground, campground_id)
    if campground is None:
        raise CampgroundNotFound(f"No Campground with the id of {campground_id}")

    if payment_method_id is None or payment_method_id == "":
        raise PaymentMethodRequired("Payment method is required")
    payment_method_id = _coerce_id(payment_method_id, "paymentMethod")

    appt = parse_appt_date(appt_date)
    now = now or datetime.utcnow()
    if is_past(appt, now):
        raise PastDate("Cannot book a past date")

    if not principal.is_admin:
        limit = booking_limit()
        existing = _count_bookings_locked(principal.user_id)
        if existing >= limit:
            raise BookingLimitReached(
                f"The user with id of {principal.user_id} has already made {limit} bookings"
            )

    payment_method = _usable_payment_method(principal, payment_method_id)

    booking = Booking(
        user_id=principal.user_id,
        campground_id=campground.id,
        appt_date=appt,
        created_at=now,
    )
    with unit_of_work("create booking") as session:
        session.add(booking)
        session.flush()
        transaction = Transaction(
            user_id=principal.user_id,
            booking_id=booking.id,
            campground_id=campground.id,
            payment_method_id=payment_method.id,
            amount=campground.price,
            status="success",
            transaction_date=now,
            paid_at=now,
        )
        session.add(transaction)

    log_event(
        "BOOKING_CREATE",
        user_id=principal.user_id,
        entity="booking",
        entity_id=booking.id,
        metadata={"campground_id": campground.id, "transaction_id": transaction.id, "amount": transaction.amount},
    )
    return booking, transaction


def update_booking(principal: Principal, booking_id: int, changes: dict, now=None) -> Booking:
    """Owner or admin may move the appointment date; it must not be in the past."""
    booking = _load_for_change(principal, booking_id, "update")

    appt = booking.appt_date
    if "appt_date" in changes:
        appt = parse_appt_date(changes["appt_date"])
        if is_past(appt, now or datetime.utcnow()):
            raise PastDate("Cannot book a past date")

    with unit_of_work("update booking"):
        booking.appt_date = appt

    log_event("BOOKING_UPDATE", user_id=principal.user_id, entity="booking", entity_id=booking.id)
    return booking


def delete_booking(principal: Principal, booking_id: int) -> None:
    """Remove the paired transaction first, then the booking, in one commit."""
    booking = _load_for_change(principal, booking_id, "delete")

    with unit_of_work("delete booking") as session:
        removed = (
            Transaction.query
            .filter_by(booking_id=booking.id)
            .delete(synchronize_session=False)
        )
        session.delete(booking)

    log_event(
        "BOOKING_DELETE",
        user_id=principal.user_id,
        entity="booking",
        entity_id=booking_id,
        metadata={"transactions_removed": removed},
    )
