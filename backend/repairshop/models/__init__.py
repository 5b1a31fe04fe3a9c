from .customers import Customer
from .tickets import Ticket, TicketUpdate, TICKET_STATUSES
from .inventory import Product
from .sales import Sale, SaleItem

__all__ = [
    'Customer',
    'Ticket', 'TicketUpdate', 'TICKET_STATUSES',
    'Product',
    'Sale', 'SaleItem',
]
