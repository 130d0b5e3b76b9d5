import os

BASE_DIR = os.path.abspath(os.path.dirname(__file__))

class Config:
    # Secrets
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-only-change-me")

    # SQLite database file stored next to the app as campground.db
    SQLALCHEMY_DATABASE_URI = os.getenv(
        "DATABASE_URL",
        "sqlite:///" + os.path.join(BASE_DIR, "campground.db")
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Drop dead connections instead of failing the request; bound the wait for a pooled connection
    SQLALCHEMY_ENGINE_OPTIONS = {"pool_pre_ping": True}
    if not SQLALCHEMY_DATABASE_URI.startswith("sqlite"):
        SQLALCHEMY_ENGINE_OPTIONS["pool_timeout"] = int(os.getenv("DB_POOL_TIMEOUT", "10"))

    # Bearer token lifetime: 8 hours
    SESSION_LIFETIME_SECONDS = int(os.getenv("SESSION_LIFETIME_SECONDS", str(8 * 60 * 60)))

    # bcrypt work factor
    BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "12"))

    # Booking policy (admins are exempt)
    BOOKING_LIMIT_PER_USER = int(os.getenv("BOOKING_LIMIT_PER_USER", "3"))

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Celery (expiry sweeper runs from beat)
    CELERY = {
        "broker_url": os.getenv("CELERY_BROKER_URL", "redis://localhost:6379/0"),
        "result_backend": os.getenv("CELERY_RESULT_BACKEND", "redis://localhost:6379/0"),
        "timezone": os.getenv("CELERY_TIMEZONE", "UTC"),
        "task_ignore_result": True,
    }

    PORT = int(os.getenv("PORT", "5003"))

    # Basic app settings
    DEBUG = False


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    SQLALCHEMY_ENGINE_OPTIONS = {}
    BCRYPT_ROUNDS = 4
    LOG_LEVEL = "WARNING"
    CELERY = {
        "broker_url": "memory://",
        "result_backend": "cache+memory://",
        "timezone": "UTC",
        "task_always_eager": True,
        "task_ignore_result": True,
    }
