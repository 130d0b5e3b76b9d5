from models import db
from models.booking import Booking
from models.campground import Campground
from models.payment_method import PaymentMethod


def _iso(value):
    return value.isoformat() if value else None


def user_to_dict(u):
    return {
        "id": u.id,
        "name": u.name,
        "email": u.email,
        "tel": u.tel,
        "role": u.role,
        "createdAt": _iso(u.created_at),
    }


def campground_summary(c):
    if c is None:
        return None
    return {"id": c.id, "name": c.name, "province": c.province, "tel": c.tel}


def campground_to_dict(c, include_bookings=False):
    out = {
        "id": c.id,
        "name": c.name,
        "address": c.address,
        "district": c.district,
        "province": c.province,
        "postalcode": c.postalcode,
        "tel": c.tel,
        "region": c.region,
        "price": c.price,
        "createdAt": _iso(c.created_at),
    }
    if include_bookings:
        out["bookings"] = [
            {"id": b.id, "apptDate": _iso(b.appt_date), "user": b.user_id}
            for b in c.bookings
        ]
    return out


def booking_to_dict(b):
    return {
        "id": b.id,
        "apptDate": _iso(b.appt_date),
        "user": b.user_id,
        "campground": campground_summary(b.campground),
        "createdAt": _iso(b.created_at),
    }


def payment_method_to_dict(pm, include_sensitive=False):
    # fingerprints never leave the server
    out = {
        "id": pm.id,
        "user": pm.user_id,
        "method": pm.method,
        "name": pm.name,
        "createdAt": _iso(pm.created_at),
    }
    if pm.method == "bank_account":
        out["bankName"] = pm.bank_name
    if include_sensitive:
        if pm.method == "credit_card":
            out["cardNumber"] = pm.card_number
        else:
            out["bankAccountNumber"] = pm.bank_account_number
    return out


def transaction_to_dict(t, populate=False):
    out = {
        "id": t.id,
        "user": t.user_id,
        "booking": t.booking_id,
        "campground": t.campground_id,
        "paymentMethod": t.payment_method_id,
        "amount": t.amount,
        "status": t.status,
        "transactionDate": _iso(t.transaction_date),
        "paidAt": _iso(t.paid_at),
    }
    if populate:
        # referents may be gone; the ledger row outlives them
        booking = db.session.get(Booking, t.booking_id)
        method = db.session.get(PaymentMethod, t.payment_method_id)
        out["booking"] = {"id": booking.id, "apptDate": _iso(booking.appt_date)} if booking else None
        out["campground"] = campground_summary(db.session.get(Campground, t.campground_id))
        out["paymentMethod"] = payment_method_to_dict(method) if method else None
    return out
