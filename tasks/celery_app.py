"""
Celery wiring for the Flask app.

Every task runs inside the Flask application context so the services and
the SQLAlchemy session work the same as they do in a request.
"""

from celery import Celery, Task
from celery.schedules import crontab

BEAT_SCHEDULE = {
    "purge-expired-bookings": {
        "task": "bookings.purge_expired",
        "schedule": crontab(minute=0, hour=0),  # daily at midnight
    },
}


def celery_init_app(app) -> Celery:
    class FlaskTask(Task):
        def __call__(self, *args, **kwargs):
            with app.app_context():
                return self.run(*args, **kwargs)

    celery_app = Celery(app.name, task_cls=FlaskTask)
    celery_app.config_from_object(app.config["CELERY"])
    celery_app.conf.update(
        task_serializer="json",
        accept_content=["json"],
        result_serializer="json",
        enable_utc=True,
        worker_hijack_root_logger=False,
        beat_schedule=BEAT_SCHEDULE,
    )

    # register the task modules
    import tasks.cleanup  # noqa: F401

    celery_app.set_default()
    app.extensions["celery"] = celery_app
    return celery_app
