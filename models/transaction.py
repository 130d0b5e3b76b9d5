from datetime import datetime
from models.db import db

class Transaction(db.Model):
    """Ledger row written together with its booking.

    References are plain ids rather than foreign keys: campground cascades,
    user removal and the expiry sweeper delete bookings but keep their
    transactions.
    """
    __tablename__ = "transactions"

    id = db.Column(db.Integer, primary_key=True)

    user_id = db.Column(db.Integer, nullable=False, index=True)
    booking_id = db.Column(db.Integer, nullable=False, index=True)
    campground_id = db.Column(db.Integer, nullable=False, index=True)
    payment_method_id = db.Column(db.Integer, nullable=False, index=True)

    amount = db.Column(db.Float, nullable=False)
    status = db.Column(db.String(20), nullable=False, default="success")

    transaction_date = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)
    paid_at = db.Column(db.DateTime, nullable=True)
