from datetime import datetime
from models.db import db

class Booking(db.Model):
    __tablename__ = "bookings"
    # ids are never reused; retained ledger rows still point at deleted bookings
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)

    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    campground_id = db.Column(db.Integer, db.ForeignKey("campgrounds.id"), nullable=False, index=True)

    appt_date = db.Column(db.DateTime, nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    campground = db.relationship("Campground", back_populates="bookings")
