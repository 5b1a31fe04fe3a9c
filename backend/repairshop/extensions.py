# Overview: Flask extension instances for database, migrations and the reminder queue.

import sqlite3

from celery import Celery, Task
from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from sqlalchemy import event
from sqlalchemy.engine import Engine

db = SQLAlchemy()
migrate = Migrate()


@event.listens_for(Engine, "connect")
def enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    """SQLite leaves ON DELETE actions off unless enabled per connection."""
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def init_celery(app: Flask) -> Celery:
    """
    Build the process-wide Celery app bound to this Flask app.

    Tasks run inside an application context so they can use db.session.
    """
    class FlaskTask(Task):
        def __call__(self, *args, **kwargs):
            with app.app_context():
                return self.run(*args, **kwargs)

    celery = Celery(app.import_name, task_cls=FlaskTask)
    celery.conf.update(
        broker_url=app.config["REDIS_URL"],
        result_backend=app.config["REDIS_URL"],
        task_default_queue=app.config["REMINDER_QUEUE"],
        task_ignore_result=True,
    )
    celery.set_default()
    app.extensions["celery"] = celery
    return celery
