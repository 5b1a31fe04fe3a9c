# backend/repairshop/config.py
from __future__ import annotations
import os


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/repairshop.sqlite3; production points at Postgres
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL",
        "sqlite:///repairshop.sqlite3",
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Reminder queue (Celery broker)
    REDIS_URL = os.environ.get("REDIS_URL", "redis://localhost:6379/0")
    REMINDER_QUEUE = os.environ.get("REMINDER_QUEUE", "reminders")

    # Messaging bot used by the reminder worker
    BOT_URL = os.environ.get("BOT_URL", "http://localhost:8081")
    BOT_TIMEOUT_SECONDS = float(os.environ.get("BOT_TIMEOUT_SECONDS", "10"))

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
