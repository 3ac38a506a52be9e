"""Order management REST API: persons, items, orders, products, clients, invoices and messages."""

__version__ = "0.1.0"
