from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, Float, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from pos_bridge.database import Base


def _utc_now():
    return datetime.now(timezone.utc)


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    created_at = Column(DateTime(timezone=True), default=_utc_now, server_default=func.now(), nullable=False)

    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=True, index=True)
    payment = Column(String, nullable=False)  # 'classic', 'paypal', ...

    # Discounts are only applied when both the name and the percent are set
    discount_name = Column(String, nullable=True)
    discount_percent = Column(Float, nullable=True)
    discount_code_name = Column(String, nullable=True)
    discount_code_percent = Column(Float, nullable=True)

    delivery_name = Column(String, nullable=True)
    delivery_cost = Column(Float, nullable=False, default=0.0)
    total_cost = Column(Float, nullable=False, default=0.0)

    pos_id = Column(String, nullable=True, index=True)  # TransactionID assigned by the POS

    customer = relationship("Customer", back_populates="orders", lazy="selectin")
    lines = relationship("OrderLine", back_populates="order", cascade="all, delete-orphan", lazy="selectin")

    def __repr__(self):
        return f"<Order(id={self.id}, payment='{self.payment}', pos_id={self.pos_id})>"


class OrderLine(Base):
    """One ordered variant: `amount` packages of `weight` for `price` in total per package"""
    __tablename__ = "order_lines"

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    variant_id = Column(Integer, ForeignKey("variants.id"), nullable=False)

    price = Column(Float, nullable=False)
    weight = Column(Float, nullable=False)
    amount = Column(Integer, nullable=False, default=1)

    order = relationship("Order", back_populates="lines")
    variant = relationship("Variant", lazy="selectin")
