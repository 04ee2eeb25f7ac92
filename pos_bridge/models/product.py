"""
Models for the local catalogue that mirrors the POS stock.

A Product is sold in several packaging weights, each one a Variant. The order
of a product's variants is significant: it is the order in which stock is
allocated during reconciliation.
"""

from datetime import datetime, timezone
from sqlalchemy import CheckConstraint, Column, Integer, String, Float, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.ext.orderinglist import ordering_list
from sqlalchemy.sql import func

from pos_bridge.database import Base


def _utc_now():
    return datetime.now(timezone.utc)


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True)
    created_at = Column(DateTime(timezone=True), default=_utc_now, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utc_now, server_default=func.now(), onupdate=_utc_now, nullable=False)

    name = Column(String, nullable=False)

    # POS identifiers
    code = Column(String, index=True, nullable=True)           # ProductID used by catalog events and transactions
    pos_master_id = Column(String, index=True, nullable=True)  # ProductID used by stock events, shared by several products

    price_per_kilo = Column(Float, nullable=True)
    minimal_quantity = Column(Integer, nullable=True)

    variants = relationship(
        "Variant",
        back_populates="product",
        order_by="Variant.position",
        collection_class=ordering_list("position"),
        cascade="all, delete-orphan",
        lazy="selectin"
    )

    @property
    def variant_weights(self):
        return [variant.weight for variant in self.variants]

    def __repr__(self):
        return f"<Product(id={self.id}, name='{self.name}', code='{self.code}', pos_master_id='{self.pos_master_id}')>"


class Variant(Base):
    __tablename__ = "variants"
    __table_args__ = (
        CheckConstraint("weight > 0", name="ck_variants_weight_positive"),
        CheckConstraint("amount >= 0", name="ck_variants_amount_nonneg"),
    )

    id = Column(Integer, primary_key=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)

    weight = Column(Float, nullable=False)   # fixed packaging weight
    amount = Column(Integer, nullable=False, default=0)  # units in stock, set by reconciliation

    product = relationship("Product", back_populates="variants", lazy="joined")

    def __repr__(self):
        return f"<Variant(id={self.id}, weight={self.weight}, amount={self.amount})>"
