from sqlalchemy import Column, Integer, Text, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from stock_ledger.database import Base


class ProductionHistory(Base):
    """Append-only record of stock produced in-house for a product."""
    __tablename__ = "production_history"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(
        Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True
    )
    quantity = Column(Integer, nullable=False)
    production_date = Column(DateTime(timezone=True), nullable=False, index=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    product = relationship("Product", back_populates="production_history")

    __table_args__ = (
        CheckConstraint('quantity > 0', name='check_production_quantity_positive'),
    )

    def __repr__(self):
        return f"<ProductionHistory(id={self.id}, product_id={self.product_id}, quantity={self.quantity})>"
