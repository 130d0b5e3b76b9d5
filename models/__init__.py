from .db import db
from .user import User, ROLES
from .audit_log import AuditLog
from .session import Session
from .campground import Campground
from .booking import Booking
from .payment_method import PaymentMethod, BANK_NAMES, PAYMENT_METHODS
from .transaction import Transaction
