from datetime import datetime
from models.db import db

class Campground(db.Model):
    __tablename__ = "campgrounds"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(50), unique=True, nullable=False)
    address = db.Column(db.String(255), nullable=False)
    district = db.Column(db.String(120), nullable=False)
    province = db.Column(db.String(120), nullable=False)
    postalcode = db.Column(db.String(5), nullable=False)
    tel = db.Column(db.String(20), unique=True, nullable=False)
    region = db.Column(db.String(120), nullable=False)
    price = db.Column(db.Float, nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    # Derived back-reference only; deletes are cascaded by the service layer.
    bookings = db.relationship(
        "Booking",
        back_populates="campground",
        order_by="Booking.appt_date",
        passive_deletes="all",
    )
