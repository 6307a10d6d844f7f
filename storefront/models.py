# storefront/models.py
from sqlalchemy import (
    Column, Integer, String, Numeric, Text, TIMESTAMP, ForeignKey, CheckConstraint, func,
)
from .db import Base


class User(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)


class Product(Base):
    __tablename__ = "products"
    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    description = Column(Text)
    category = Column(String, nullable=False, index=True)
    price = Column(Numeric(10, 2), nullable=False)
    image_url = Column(String)


class Order(Base):
    __tablename__ = "orders"
    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    created_at = Column(TIMESTAMP, server_default=func.now())


class OrderItem(Base):
    __tablename__ = "order_items"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_order_items_quantity_positive"),
    )
    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)
    quantity = Column(Integer, nullable=False)
    # price snapshot taken from products.price when the order is placed
    price = Column(Numeric(10, 2))


class ProductAssociation(Base):
    """Pairwise co-purchase counts, filled by an offline job."""
    __tablename__ = "product_associations"
    __table_args__ = (
        CheckConstraint("frequency >= 0", name="ck_product_associations_frequency"),
    )
    product1 = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), primary_key=True)
    product2 = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), primary_key=True)
    frequency = Column(Integer, nullable=False, default=0)
