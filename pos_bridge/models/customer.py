from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from pos_bridge.database import Base


def _utc_now():
    return datetime.now(timezone.utc)


class Customer(Base):
    """Local shop customer, registered in the POS on first outbound sync"""
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True)
    created_at = Column(DateTime(timezone=True), default=_utc_now, server_default=func.now(), nullable=False)

    public_name = Column(String, nullable=False)
    email = Column(String, nullable=False, index=True)
    phone = Column(String, nullable=True)

    # Delivery address
    street = Column(String, nullable=True)
    post_code = Column(String, nullable=True)
    city = Column(String, nullable=True)

    pos_id = Column(String, nullable=True, index=True)  # CustomerID assigned by the POS

    orders = relationship("Order", back_populates="customer")

    def __repr__(self):
        return f"<Customer(id={self.id}, email='{self.email}', pos_id={self.pos_id})>"
