"""
Sale processor tests.

Verifies:
- Totals equal the sum of line totals, priced at execution time
- Stock is decremented per line, compounding for repeated products
- Any failing line rolls back every earlier decrement
- Validation failures write nothing
- Identical payloads produce independent sales
"""

import re

import pytest

from repairshop.errors import InsufficientStockError, NotFoundError, ValidationError
from repairshop.extensions import db
from repairshop.models import Customer, Product, Sale, SaleItem
from repairshop.services import sales_service


def _stock(product_id):
    db.session.expire_all()
    return db.session.get(Product, product_id).stock


def _assert_nothing_written(session):
    assert session.query(Sale).count() == 0
    assert session.query(SaleItem).count() == 0


# =============================================================================
# SUCCESSFUL SALES
# =============================================================================


class TestCreateSale:

    def test_single_line_sale(self, db_session, screen):
        sale = sales_service.create_sale("CASH", [{"product_id": screen.id, "quantity": 2}])

        assert sale.total_cents == 25800
        assert sale.payment_method == "CASH"
        assert len(sale.items) == 1
        item = sale.items[0]
        assert item.unit_price_cents == 12900
        assert item.line_total_cents == 25800
        assert _stock(screen.id) == 3

    def test_invoice_code_uses_creation_year(self, db_session, screen):
        sale = sales_service.create_sale("CARD", [{"product_id": screen.id, "quantity": 1}])

        assert re.fullmatch(r"INV-\d{4}-\d{5}", sale.invoice_code)
        assert sale.invoice_code == f"INV-{sale.created_at.year}-{sale.id:05d}"

    def test_total_matches_lines(self, db_session, screen, battery):
        sale = sales_service.create_sale("CARD", [
            {"product_id": screen.id, "quantity": 1},
            {"product_id": battery.id, "quantity": 2},
        ])

        assert sale.total_cents == sum(i.line_total_cents for i in sale.items)
        for item in sale.items:
            assert item.line_total_cents == item.unit_price_cents * item.quantity
        assert sale.total_cents == 12900 + 2 * 4550

    def test_repeated_product_lines_compound(self, db_session, screen):
        sale = sales_service.create_sale("CASH", [
            {"product_id": screen.id, "quantity": 2},
            {"product_id": screen.id, "quantity": 3},
        ])

        assert [i.quantity for i in sale.items] == [2, 3]
        assert _stock(screen.id) == 0

    def test_repeated_product_lines_cannot_oversell(self, db_session, screen):
        with pytest.raises(InsufficientStockError) as exc_info:
            sales_service.create_sale("CASH", [
                {"product_id": screen.id, "quantity": 3},
                {"product_id": screen.id, "quantity": 3},
            ])

        assert exc_info.value.available == 2
        assert _stock(screen.id) == 5
        _assert_nothing_written(db_session)

    def test_price_snapshot_survives_price_change(self, db_session, screen):
        sale = sales_service.create_sale("CASH", [{"product_id": screen.id, "quantity": 1}])

        product = db_session.get(Product, screen.id)
        product.price_cents = 19900
        db_session.commit()

        reloaded = sales_service.get_sale(sale.id)
        assert reloaded.items[0].unit_price_cents == 12900
        assert reloaded.total_cents == 12900

    def test_prices_at_execution_time(self, db_session, screen):
        product = db_session.get(Product, screen.id)
        product.price_cents = 9900
        db_session.commit()

        sale = sales_service.create_sale("CASH", [{"product_id": screen.id, "quantity": 1}])
        assert sale.total_cents == 9900

    def test_with_customer(self, db_session, screen):
        sale = sales_service.create_sale(
            "CASH",
            [{"product_id": screen.id, "quantity": 1}],
            customer={"name": "Ali", "phone": "0123", "email": "ali@example.com"},
        )

        assert sale.customer.phone == "0123"
        assert sale.to_dict()["customer"]["email"] == "ali@example.com"

    def test_identical_payloads_are_independent(self, db_session, screen):
        payload = [{"product_id": screen.id, "quantity": 1}]

        first = sales_service.create_sale("CASH", payload)
        second = sales_service.create_sale("CASH", payload)

        assert first.id != second.id
        assert first.invoice_code != second.invoice_code
        assert first.total_cents == second.total_cents == 12900
        assert _stock(screen.id) == 3
        assert db_session.query(Sale).count() == 2


# =============================================================================
# FAILURES
# =============================================================================


class TestSaleFailures:

    def test_empty_item_list(self, db_session, screen):
        with pytest.raises(ValidationError):
            sales_service.create_sale("CASH", [])

        _assert_nothing_written(db_session)
        assert _stock(screen.id) == 5

    def test_min_items(self, db_session, screen):
        with pytest.raises(ValidationError):
            sales_service.create_sale("CASH", [{"product_id": screen.id, "quantity": 1}], min_items=2)

        _assert_nothing_written(db_session)

    @pytest.mark.parametrize("payment_method", [None, "", "   ", 5, "X" * 33])
    def test_bad_payment_method(self, db_session, screen, payment_method):
        with pytest.raises(ValidationError):
            sales_service.create_sale(payment_method, [{"product_id": screen.id, "quantity": 1}])

        _assert_nothing_written(db_session)

    @pytest.mark.parametrize("item", [
        {"quantity": 1},
        {"product_id": "1", "quantity": 1},
        {"product_id": 1, "quantity": 0},
        {"product_id": 1, "quantity": -2},
        {"product_id": 1, "quantity": 1.5},
        {"product_id": 1, "quantity": True},
        "not-an-object",
    ])
    def test_bad_items(self, db_session, screen, item):
        with pytest.raises(ValidationError):
            sales_service.create_sale("CASH", [item])

        _assert_nothing_written(db_session)
        assert _stock(screen.id) == 5

    def test_unknown_product(self, db_session, screen):
        with pytest.raises(NotFoundError):
            sales_service.create_sale("CASH", [
                {"product_id": screen.id, "quantity": 1},
                {"product_id": screen.id + 1000, "quantity": 1},
            ])

        _assert_nothing_written(db_session)
        assert _stock(screen.id) == 5

    def test_second_line_short_rolls_back_first(self, db_session, screen, battery):
        with pytest.raises(InsufficientStockError) as exc_info:
            sales_service.create_sale("CASH", [
                {"product_id": screen.id, "quantity": 2},
                {"product_id": battery.id, "quantity": 3},
            ])

        err = exc_info.value
        assert err.product_id == battery.id
        assert err.requested == 3
        assert err.available == 2
        assert err.details["product_name"] == "ThinkPad X1 battery"

        assert _stock(screen.id) == 5
        assert _stock(battery.id) == 2
        _assert_nothing_written(db_session)

    def test_failed_sale_does_not_create_customer(self, db_session, battery):
        with pytest.raises(InsufficientStockError):
            sales_service.create_sale(
                "CASH",
                [{"product_id": battery.id, "quantity": 10}],
                customer={"name": "Mona", "phone": "0456"},
            )

        assert db_session.query(Customer).count() == 0


# =============================================================================
# READS
# =============================================================================


class TestReadSales:

    def test_list_newest_first(self, db_session, screen):
        first = sales_service.create_sale("CASH", [{"product_id": screen.id, "quantity": 1}])
        second = sales_service.create_sale("CARD", [{"product_id": screen.id, "quantity": 1}])

        assert [s.id for s in sales_service.list_sales()] == [second.id, first.id]
        assert [s.id for s in sales_service.list_sales(limit=1)] == [second.id]

    @pytest.mark.parametrize("limit", [0, -1, "5", True])
    def test_rejects_non_positive_limit(self, db_session, limit):
        with pytest.raises(ValidationError):
            sales_service.list_sales(limit=limit)

    def test_get_missing(self, db_session):
        with pytest.raises(NotFoundError):
            sales_service.get_sale(31337)
