"""Background jobs run by Celery workers and beat."""
