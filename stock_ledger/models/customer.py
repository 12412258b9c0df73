import enum

from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from stock_ledger.database import Base


class CustomerDeleteOutcome(str, enum.Enum):
    """What a delete request did to the customer row."""
    DEACTIVATED = "deactivated"
    DELETED = "deleted"


class Customer(Base):
    """
    Customer model. Customers with sales are deactivated instead of
    deleted so the sale history keeps its references.
    """
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, index=True)
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    document = Column(String(50), nullable=True)
    address = Column(String(255), nullable=True)
    city = Column(String(100), nullable=True)
    state = Column(String(2), nullable=True)
    zip_code = Column(String(20), nullable=True)
    notes = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    sales = relationship("Sale", back_populates="customer", passive_deletes="all")

    def __repr__(self):
        return f"<Customer(id={self.id}, name='{self.name}', active={self.is_active})>"
