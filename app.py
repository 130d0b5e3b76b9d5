import logging

import click
from flask import Flask
from flask_migrate import Migrate

from config import Config
from models import db
from models.user import User
from routes import (
    health_bp,
    auth_bp,
    admin_bp,
    campground_bp,
    booking_bp,
    payment_method_bp,
    transaction_bp,
)
from routes.errors import register_error_handlers
from services.sweeper import purge_expired_bookings
from tasks.celery_app import celery_init_app
from utils.auth_context import load_current_user


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)

    logging.basicConfig(
        level=app.config.get("LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Register routes
    app.register_blueprint(health_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(admin_bp)
    app.register_blueprint(campground_bp)
    app.register_blueprint(booking_bp)
    app.register_blueprint(payment_method_bp)
    app.register_blueprint(transaction_bp)

    register_error_handlers(app)

    # Database init
    db.init_app(app)

    # Migrations
    Migrate(app, db)

    # Background jobs (expiry sweeper)
    celery_init_app(app)

    @app.before_request
    def _load_user():
        load_current_user()

    @app.after_request
    def add_security_headers(resp):
        resp.headers["X-Content-Type-Options"] = "nosniff"
        resp.headers["X-Frame-Options"] = "DENY"
        resp.headers["Referrer-Policy"] = "no-referrer"
        # JSON API only
        resp.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none';"
        return resp

    register_cli(app)

    return app

#-------------------------

def register_cli(app):
    @app.cli.command("make-admin")
    @click.argument("email")
    def make_admin(email):
        """Promote a user to admin by email (bootstrap)."""
        user = User.query.filter_by(email=email.strip().lower()).first()
        if not user:
            click.echo("User not found")
            return

        if user.role != "admin":
            user.role = "admin"
            db.session.commit()

        click.echo(f"{user.email} promoted to admin")

    @app.cli.command("purge-expired-bookings")
    def purge_expired():
        """Run the expiry sweeper once, outside of Celery beat."""
        removed = purge_expired_bookings()
        click.echo(f"{removed} expired booking(s) removed")

#-------------------------


if __name__ == "__main__":
    app = create_app()
    # Run locally
    app.run(host="127.0.0.1", port=app.config["PORT"])
