"""
Pytest fixtures for the repair shop backend tests.

Provides an in-memory application, a per-test table wipe, catalog fixtures and
a recording stand-in for the reminder queue.
"""

import pytest

from repairshop import create_app
from repairshop.extensions import db
from repairshop.models import Product
from repairshop.services.reminder_service import ReminderScheduler


class RecordingQueue:
    """Stand-in for the Celery app: records send_task calls instead of publishing."""

    def __init__(self, fail_on=()):
        self.sent = []
        self.fail_on = set(fail_on)

    def send_task(self, name, kwargs=None, countdown=None, queue=None):
        if name in self.fail_on:
            raise ConnectionError(f"broker refused {name}")
        self.sent.append({
            "name": name,
            "kwargs": kwargs,
            "countdown": countdown,
            "queue": queue,
        })

    def for_ticket(self, ticket_id):
        return [job for job in self.sent if job["kwargs"] == {"ticketId": str(ticket_id)}]


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'BOT_URL': 'http://bot.test',
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='function')
def queue(app):
    """Swap the app's reminder scheduler onto a recording queue."""
    original = app.extensions["reminder_scheduler"]
    recording = RecordingQueue()
    app.extensions["reminder_scheduler"] = ReminderScheduler(recording, queue_name="reminders")
    yield recording
    app.extensions["reminder_scheduler"] = original


def make_product(session, sku, name, price_cents, stock):
    product = Product(sku=sku, name=name, price_cents=price_cents, stock=stock)
    session.add(product)
    session.commit()
    return product


@pytest.fixture(scope='function')
def screen(db_session):
    """Replacement screen, 5 in stock at 129.00."""
    return make_product(db_session, "SCR-X1", "ThinkPad X1 screen", 12900, 5)


@pytest.fixture(scope='function')
def battery(db_session):
    """Battery, 2 in stock at 45.50."""
    return make_product(db_session, "BAT-X1", "ThinkPad X1 battery", 4550, 2)
