from sqlalchemy import (
    Column, Integer, Numeric, Text, DateTime, ForeignKey, CheckConstraint
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from stock_ledger.database import Base


class Sale(Base):
    """
    Sale model representing one product sold in one transaction.

    Rows are never updated: deleting a sale is the only correction and it
    gives the quantity back to the product's stock.

    Attributes:
        id: Unique identifier for the sale
        product_id: Reference to the sold product
        customer_id: Reference to the customer, None for a walk-in sale
        quantity: Number of items sold
        unit_price: Price per item at the moment of the sale
        discount: Discount applied to the whole sale
        total_amount: quantity * unit_price - discount
        sale_date: Calendar day of the sale, stored as UTC midnight
        notes: Free-text notes
        created_at: Timestamp when the sale was recorded
    """
    __tablename__ = "sales"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(
        Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True
    )
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=True, index=True)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(12, 2), nullable=False)
    discount = Column(Numeric(12, 2), nullable=False, default=0)
    total_amount = Column(Numeric(12, 2), nullable=False)
    sale_date = Column(DateTime(timezone=True), nullable=False, index=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    product = relationship("Product", backref="sales")
    customer = relationship("Customer", back_populates="sales")

    __table_args__ = (
        CheckConstraint('quantity > 0', name='check_sale_quantity_positive'),
        CheckConstraint('unit_price >= 0', name='check_unit_price_non_negative'),
        CheckConstraint('discount >= 0', name='check_discount_non_negative'),
        CheckConstraint('total_amount >= 0', name='check_total_non_negative'),
    )

    def __repr__(self):
        return f"<Sale(id={self.id}, product_id={self.product_id}, quantity={self.quantity})>"
