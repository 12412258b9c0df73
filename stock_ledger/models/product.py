from sqlalchemy import (
    Column, Integer, String, Text, Numeric, DateTime, ForeignKey, CheckConstraint
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from stock_ledger.database import Base


class Product(Base):
    """
    Product model representing items kept in stock.

    Attributes:
        id: Unique identifier for the product
        name: Product name
        category: Free-text category tag
        size: Optional size label
        cost_price: Current cost price
        sale_price: Current list sale price
        stock_quantity: Running stock total, moved only by sales and production
        initial_stock: Stock the product was created with
        company_id: Supplying company, None for internal production
        created_at: Timestamp when product was created
        updated_at: Timestamp when product was last updated
    """
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, index=True)
    description = Column(Text, nullable=True)
    category = Column(String(100), nullable=False, index=True)
    size = Column(String(50), nullable=True)
    cost_price = Column(Numeric(12, 2), nullable=False, default=0)
    sale_price = Column(Numeric(12, 2), nullable=False, default=0)
    stock_quantity = Column(Integer, nullable=False, default=0)
    initial_stock = Column(Integer, nullable=False, default=0)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    company = relationship("Company", back_populates="products")
    production_history = relationship(
        "ProductionHistory",
        back_populates="product",
        cascade="all, delete-orphan",
    )

    # Database-level constraints to ensure data integrity
    __table_args__ = (
        CheckConstraint('cost_price >= 0', name='check_cost_price_non_negative'),
        CheckConstraint('sale_price >= 0', name='check_sale_price_non_negative'),
        CheckConstraint('stock_quantity >= 0', name='check_stock_non_negative'),
        CheckConstraint('initial_stock >= 0', name='check_initial_stock_non_negative'),
    )

    @property
    def is_internal(self) -> bool:
        return self.company_id is None

    def __repr__(self):
        return f"<Product(id={self.id}, name='{self.name}', stock={self.stock_quantity})>"
