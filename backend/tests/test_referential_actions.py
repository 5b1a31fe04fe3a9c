"""
Foreign key behaviour on delete.

Verifies:
- Deleting a customer detaches its tickets and sales (customer_id -> NULL)
- Deleting a product detaches sale items but keeps their price snapshot
- Deleting a ticket or sale removes its update log / items
"""

from repairshop.models import Customer, Product, Sale, SaleItem, Ticket, TicketUpdate
from repairshop.services import sales_service, ticket_service


def _customer():
    return {"name": "Ali", "phone": "0123"}


class TestCustomerDelete:

    def test_tickets_and_sales_are_detached(self, db_session, queue, screen):
        ticket = ticket_service.create_ticket(_customer(), "ThinkPad X1", "No boot")
        sale = sales_service.create_sale(
            "CASH",
            [{"product_id": screen.id, "quantity": 1}],
            customer=_customer(),
        )
        ticket_id, sale_id = ticket.id, sale.id
        db_session.expire_all()

        db_session.delete(db_session.query(Customer).filter_by(phone="0123").one())
        db_session.commit()
        db_session.expire_all()

        ticket = db_session.get(Ticket, ticket_id)
        sale = db_session.get(Sale, sale_id)
        assert ticket.customer_id is None
        assert sale.customer_id is None
        assert ticket.to_dict()["customer"] is None


class TestProductDelete:

    def test_sale_items_keep_snapshot(self, db_session, screen):
        sale = sales_service.create_sale("CASH", [{"product_id": screen.id, "quantity": 2}])
        sale_id = sale.id
        db_session.expire_all()

        db_session.delete(db_session.get(Product, screen.id))
        db_session.commit()
        db_session.expire_all()

        item = db_session.query(SaleItem).filter_by(sale_id=sale_id).one()
        assert item.product_id is None
        assert item.unit_price_cents == 12900
        assert item.line_total_cents == 25800
        assert db_session.get(Sale, sale_id).total_cents == 25800


class TestCascades:

    def test_ticket_delete_removes_update_log(self, db_session, queue):
        ticket = ticket_service.create_ticket(_customer(), "ThinkPad X1", "No boot")
        ticket_service.update_ticket(ticket.id, {"message": "Board replaced"})
        db_session.expire_all()

        db_session.delete(db_session.get(Ticket, ticket.id))
        db_session.commit()

        assert db_session.query(TicketUpdate).count() == 0
        assert db_session.query(Customer).count() == 1

    def test_sale_delete_removes_items(self, db_session, screen):
        sale = sales_service.create_sale("CASH", [{"product_id": screen.id, "quantity": 1}])
        db_session.expire_all()

        db_session.delete(db_session.get(Sale, sale.id))
        db_session.commit()

        assert db_session.query(SaleItem).count() == 0
        assert db_session.get(Product, screen.id).stock == 4
