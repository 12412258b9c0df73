from pydantic import BaseModel, Field, ConfigDict
from datetime import datetime
from typing import Optional


class CompanyCreate(BaseModel):
    """Schema for registering a supplier company."""
    name: str = Field(..., min_length=1, max_length=255, description="Company name")
    description: Optional[str] = None
    cnpj: Optional[str] = Field(None, max_length=32, description="Tax registration number, unique")
    email: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    address: Optional[str] = Field(None, max_length=255)
    city: Optional[str] = Field(None, max_length=100)
    state: Optional[str] = Field(None, max_length=2)
    zip_code: Optional[str] = Field(None, max_length=20)


class CompanyResponse(CompanyCreate):
    id: int
    is_active: bool
    product_count: int = 0
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
