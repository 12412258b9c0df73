from pydantic import BaseModel, Field, ConfigDict
from datetime import date, datetime
from decimal import Decimal
from typing import Optional


class SaleCreate(BaseModel):
    """Schema for recording a sale."""
    product_id: int = Field(..., gt=0, description="ID of the product sold")
    customer_id: Optional[int] = Field(None, gt=0, description="Customer ID, empty for a walk-in sale")
    quantity: int = Field(..., ge=1, description="Quantity sold")
    unit_price: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2, description="Price per item")
    discount: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2, description="Discount on the sale")
    notes: Optional[str] = Field(None, description="Free-text notes")
    sale_date: Optional[date] = Field(None, description="Calendar day of the sale, defaults to today")


class SaleResponse(BaseModel):
    """Schema for sale response."""
    id: int
    product_id: int
    customer_id: Optional[int] = None
    quantity: int
    unit_price: float
    discount: float
    total_amount: float
    sale_date: datetime
    notes: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class SaleWithDetails(SaleResponse):
    """Schema for sale response including product and customer names."""
    product_name: Optional[str] = None
    product_category: Optional[str] = None
    customer_name: Optional[str] = None


class SaleListResponse(BaseModel):
    """Schema for paginated sale list response."""
    items: list[SaleWithDetails]
    total: int
    page: int
    page_size: int
    total_pages: int


class SaleDeleteResponse(BaseModel):
    message: str
    restored_quantity: int
