"""Storefront: REST backend for users, products, orders and co-purchase suggestions."""

__version__ = "0.1.0"
