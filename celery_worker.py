from celery import Celery
from celery.schedules import crontab
from flask import has_app_context

from app import app  # Ensure app.py does not import tasks.py


def make_celery(app):
    celery = Celery(
        app.import_name,
        broker=app.config["CELERY_BROKER_URL"],
        backend=app.config["CELERY_RESULT_BACKEND"]
    )
    # Load configuration from Flask app using the namespace "CELERY"
    celery.config_from_object(app.config, namespace="CELERY")

    # Wrap tasks so they run within a Flask application context. Eager tasks
    # started from a request reuse that request's app.
    class ContextTask(celery.Task):
        def __call__(self, *args, **kwargs):
            if has_app_context():
                return self.run(*args, **kwargs)
            with app.app_context():
                return self.run(*args, **kwargs)
    celery.Task = ContextTask
    return celery


celery = make_celery(app)

celery.conf.beat_schedule = {
    "reconcile-stuck-records": {
        "task": "reconcile_stuck_records_task",
        "schedule": crontab(minute="*/15"),
    },
}

# Force registration of tasks.
import tasks  # noqa: E402,F401
