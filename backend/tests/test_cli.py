"""
CLI command tests.

Runs the click groups through Flask's test runner against the shared app.
"""

from repairshop.models import Product
from repairshop.services import ticket_service


def _customer():
    return {"name": "Ali", "phone": "0123"}


class TestProductCommands:

    def test_upsert_creates_then_updates(self, app, db_session):
        runner = app.test_cli_runner()

        result = runner.invoke(args=[
            "products", "upsert", "--sku", "CHG-65W", "--name", "65W charger",
            "--price-cents", "3900", "--stock", "4",
        ])
        assert result.exit_code == 0, result.output
        assert "Created product CHG-65W" in result.output

        result = runner.invoke(args=[
            "products", "upsert", "--sku", "CHG-65W", "--name", "65W USB-C charger", "--stock", "7",
        ])
        assert result.exit_code == 0, result.output
        assert "Updated product CHG-65W" in result.output

        product = db_session.query(Product).filter_by(sku="CHG-65W").one()
        assert product.name == "65W USB-C charger"
        assert product.stock == 7

    def test_upsert_rejects_negative_stock(self, app, db_session):
        result = app.test_cli_runner().invoke(args=[
            "products", "upsert", "--sku", "CHG-65W", "--name", "65W charger", "--stock", "-1",
        ])
        assert result.exit_code != 0
        assert db_session.query(Product).count() == 0

    def test_list(self, app, screen):
        result = app.test_cli_runner().invoke(args=["products", "list"])
        assert result.exit_code == 0
        assert "SCR-X1" in result.output
        assert "stock=5" in result.output

    def test_list_empty(self, app, db_session):
        result = app.test_cli_runner().invoke(args=["products", "list"])
        assert "No products" in result.output


class TestReminderCommands:

    def test_schedule_enqueues_another_set(self, app, db_session, queue):
        ticket = ticket_service.create_ticket(_customer(), "ThinkPad X1", "No boot")

        result = app.test_cli_runner().invoke(args=["reminders", "schedule", str(ticket.id)])

        assert result.exit_code == 0, result.output
        assert f"Enqueued 3 reminder(s) for {ticket.code}" in result.output
        assert len(queue.for_ticket(ticket.id)) == 6

    def test_schedule_missing_ticket(self, app, db_session, queue):
        result = app.test_cli_runner().invoke(args=["reminders", "schedule", "999"])
        assert result.exit_code != 0
        assert queue.sent == []


class TestSystemCommands:

    def test_init_db_is_idempotent(self, app, db_session):
        result = app.test_cli_runner().invoke(args=["system", "init-db"])
        assert result.exit_code == 0
        assert "Tables created" in result.output
