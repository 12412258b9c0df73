from pydantic import BaseModel, Field, ConfigDict
from datetime import datetime
from typing import Optional

from stock_ledger.models.customer import CustomerDeleteOutcome
from stock_ledger.schemas.sale import SaleResponse


class CustomerBase(BaseModel):
    """Base schema for Customer with common attributes."""
    name: str = Field(..., min_length=1, max_length=255, description="Customer name")
    email: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    document: Optional[str] = Field(None, max_length=50)
    address: Optional[str] = Field(None, max_length=255)
    city: Optional[str] = Field(None, max_length=100)
    state: Optional[str] = Field(None, max_length=2, description="Two-letter state code")
    zip_code: Optional[str] = Field(None, max_length=20)
    notes: Optional[str] = None
    is_active: bool = True


class CustomerCreate(CustomerBase):
    pass


class CustomerUpdate(BaseModel):
    """Schema for updating a customer. All fields are optional."""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    document: Optional[str] = Field(None, max_length=50)
    address: Optional[str] = Field(None, max_length=255)
    city: Optional[str] = Field(None, max_length=100)
    state: Optional[str] = Field(None, max_length=2)
    zip_code: Optional[str] = Field(None, max_length=20)
    notes: Optional[str] = None
    is_active: Optional[bool] = None


class CustomerResponse(CustomerBase):
    id: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CustomerDetail(CustomerResponse):
    """Customer with the sales it made and their totals."""
    sales: list[SaleResponse] = []
    total_spent: float
    total_items: int
    sales_count: int


class CustomerListResponse(BaseModel):
    items: list[CustomerResponse]
    total: int
    page: int
    page_size: int
    total_pages: int


class CustomerDeleteResponse(BaseModel):
    outcome: CustomerDeleteOutcome
    message: str
