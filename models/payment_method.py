from datetime import datetime
from models.db import db

PAYMENT_METHODS = ("credit_card", "bank_account")

BANK_NAMES = (
    "KBank",
    "SCB",
    "BBL",
    "Krungsri",
    "KTB",
    "TTB",
    "BAAC",
    "GSB",
    "CIMB",
    "UOB",
)

class PaymentMethod(db.Model):
    __tablename__ = "payment_methods"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    method = db.Column(db.String(20), nullable=False)  # credit_card | bank_account
    name = db.Column(db.String(50), nullable=True)

    # credit_card branch
    card_number = db.Column(db.String(19), nullable=True)
    card_fingerprint = db.Column(db.String(64), nullable=True, unique=True, index=True)

    # bank_account branch
    bank_account_number = db.Column(db.String(12), nullable=True)
    bank_account_fingerprint = db.Column(db.String(64), nullable=True, unique=True, index=True)
    bank_name = db.Column(db.String(20), nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
