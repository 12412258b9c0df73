from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional

from stock_ledger.database import get_db
from stock_ledger.services.report_service import ReportService
from stock_ledger.schemas.report import SalesReport, DashboardResponse

router = APIRouter(tags=["Reports"])


@router.get(
    "/reports",
    response_model=SalesReport,
    summary="Sales report",
    description="""
    Sales between two calendar days, both included in full.

    Returns summary totals (revenue, cost, profit, margin), one row per sale,
    and per-customer and per-product statistics.
    """
)
def get_report(
    start_date: Optional[str] = Query(None, description="First day, YYYY-MM-DD"),
    end_date: Optional[str] = Query(None, description="Last day, YYYY-MM-DD"),
    customer_id: Optional[int] = Query(None, description="Only sales to this customer"),
    product_id: Optional[int] = Query(None, description="Only sales of this product"),
    db: Session = Depends(get_db)
):
    return ReportService(db).generate_report(start_date, end_date, customer_id, product_id)


@router.get(
    "/dashboard",
    response_model=DashboardResponse,
    summary="Dashboard",
    description="""
    Revenue today and this month, active customers, top products and
    customers over the last 30 days, low-stock products and the daily
    sales series of the last 7 days.
    """
)
def get_dashboard(db: Session = Depends(get_db)):
    return ReportService(db).get_dashboard()
