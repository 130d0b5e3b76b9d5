from routes.health import health_bp
from routes.auth import auth_bp
from routes.admin import admin_bp
from routes.campgrounds import campground_bp
from routes.booking import booking_bp
from routes.payment_methods import payment_method_bp
from routes.transactions import transaction_bp

__all__ = [
    "health_bp",
    "auth_bp",
    "admin_bp",
    "campground_bp",
    "booking_bp",
    "payment_method_bp",
    "transaction_bp",
]
