from pydantic import BaseModel
from typing import Optional


class ReportSummary(BaseModel):
    total_sales: int
    total_revenue: float
    total_cost: float
    total_profit: float
    total_items: int
    total_discount: float
    profit_margin: str


class ReportSaleRow(BaseModel):
    id: int
    date: str
    product_name: str
    product_category: str
    customer_name: str
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None
    customer_city: Optional[str] = None
    customer_state: Optional[str] = None
    quantity: int
    unit_price: float
    discount: float
    total_amount: float
    cost_price: float
    profit: float
    notes: Optional[str] = None


class CustomerStat(BaseModel):
    customer_id: int
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    total_spent: float
    total_items: int
    sales_count: int


class ProductStat(BaseModel):
    product_id: int
    name: str
    category: str
    total_sold: int
    total_revenue: float
    sales_count: int


class SalesReport(BaseModel):
    """Sales report for an inclusive range of calendar days."""
    start_date: str
    end_date: str
    summary: ReportSummary
    sales: list[ReportSaleRow]
    customer_stats: list[CustomerStat]
    product_stats: list[ProductStat]


class TopProduct(BaseModel):
    product_id: int
    name: str
    category: str
    total_sold: int
    revenue: float


class TopCustomer(BaseModel):
    customer_id: int
    name: str
    email: Optional[str] = None
    total_spent: float
    total_items: int


class LowStockProduct(BaseModel):
    id: int
    name: str
    category: str
    stock_quantity: int


class DailySales(BaseModel):
    date: str
    revenue: float
    sales_count: int


class DashboardResponse(BaseModel):
    today_revenue: float
    month_revenue: float
    total_customers: int
    top_products: list[TopProduct]
    top_customers: list[TopCustomer]
    low_stock_products: list[LowStockProduct]
    daily_sales: list[DailySales]
