from pydantic import BaseModel, Field, ConfigDict
from datetime import date, datetime
from typing import Optional

from stock_ledger.schemas.product import ProductResponse


class ProductionCreate(BaseModel):
    """Schema for recording a production (restock) entry."""
    quantity: int = Field(..., ge=1, description="Units produced")
    production_date: Optional[date] = Field(None, description="Calendar day of production, defaults to today")
    notes: Optional[str] = None


class ProductionResponse(BaseModel):
    id: int
    product_id: int
    quantity: int
    production_date: datetime
    notes: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProductionResult(BaseModel):
    """Updated product together with the history row that moved its stock."""
    message: str
    product: ProductResponse
    production_record: ProductionResponse


class CompanySummary(BaseModel):
    id: int
    name: str


class TopProductionItem(BaseModel):
    id: int
    name: str
    category: str
    size: Optional[str] = None
    stock_quantity: int
    total_produced: int
    company: Optional[CompanySummary] = None
