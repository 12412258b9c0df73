from pydantic import BaseModel, Field, ConfigDict
from datetime import datetime
from decimal import Decimal
from typing import Optional


class ProductBase(BaseModel):
    """Base schema for Product with common attributes."""
    name: str = Field(..., min_length=1, max_length=255, description="Product name")
    description: Optional[str] = Field(None, description="Product description")
    category: str = Field(..., min_length=1, max_length=100, description="Category tag")
    size: Optional[str] = Field(None, max_length=50, description="Size label")
    company_id: Optional[int] = Field(None, description="Supplying company, empty for internal production")


class ProductCreate(ProductBase):
    """Schema for creating a new product."""
    cost_price: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2, description="Cost price")
    sale_price: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2, description="Sale price")
    stock_quantity: int = Field(0, ge=0, description="Initial stock (must be non-negative)")


class ProductUpdate(BaseModel):
    """
    Schema for updating an existing product. All fields are optional.
    Stock is not editable here: it only moves through sales and production.
    """
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    size: Optional[str] = Field(None, max_length=50)
    cost_price: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)
    sale_price: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)
    company_id: Optional[int] = None


class ProductResponse(ProductBase):
    """Schema for product response including all fields."""
    id: int
    cost_price: float
    sale_price: float
    stock_quantity: int
    initial_stock: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProductListResponse(BaseModel):
    """Schema for paginated product list response."""
    items: list[ProductResponse]
    total: int
    page: int
    page_size: int
    total_pages: int


class LedgerBalance(BaseModel):
    """Stock as recorded on the product versus stock rebuilt from the ledger."""
    product_id: int
    initial_stock: int
    total_produced: int
    total_sold: int
    expected_stock: int
    stock_quantity: int
    consistent: bool
