"""
Read-only aggregations over sales: the date-range sales report and the
dashboard.

Sale dates are stored as UTC midnight of their calendar day, so every
boundary here is built with the helpers from ``stock_ledger.utils.dates``:
day-level filters cover the whole day (00:00:00.000 to 23:59:59.999 UTC),
"today" and "this month" start at UTC midnight, rolling windows are
``now`` minus a fixed duration.

Group totals are computed with SQL GROUP BY. Group keys are then resolved
to display names with a separate lookup, and a key whose row no longer
exists gets a placeholder name instead of failing the report.

Profit uses each product's current cost price; cost is not snapshotted at
sale time.
"""
from datetime import datetime
from decimal import Decimal
from typing import Dict, Iterable, Optional
import logging

from sqlalchemy import func

from stock_ledger.config import get_settings
from stock_ledger.models.customer import Customer
from stock_ledger.models.product import Product
from stock_ledger.models.sale import Sale
from stock_ledger.exceptions import InvalidDateRangeError, ValidationError
from stock_ledger.services.base import BaseService
from stock_ledger.services.product_service import ProductService
from stock_ledger.utils.dates import (
    DateInput,
    day_range,
    days_ago,
    format_calendar_date,
    start_of_day,
    start_of_month,
    utc_now,
)
from stock_ledger.utils.money import ZERO, profit_margin, to_money

logger = logging.getLogger(__name__)

settings = get_settings()

WALK_IN_CUSTOMER = "Walk-in sale"
CUSTOMER_NOT_FOUND = "Customer not found"
PRODUCT_NOT_FOUND = "Product not found"

TOP_LIMIT = 5
TOP_WINDOW_DAYS = 30
DAILY_WINDOW_DAYS = 7


class ReportService(BaseService):
    """Sales report and dashboard queries. Never writes."""

    def generate_report(
        self,
        start_date: Optional[DateInput],
        end_date: Optional[DateInput],
        customer_id: int = None,
        product_id: int = None,
    ) -> dict:
        """
        Build the sales report for an inclusive range of calendar days.

        Args:
            start_date: First day of the range (YYYY-MM-DD)
            end_date: Last day of the range, included in full
            customer_id: Only sales to this customer
            product_id: Only sales of this product

        Returns:
            Dictionary matching the SalesReport schema

        Raises:
            InvalidDateRangeError: If a date is missing, malformed or the
                range is reversed
        """
        db = self._require_db()

        if not start_date or not end_date:
            raise InvalidDateRangeError("Start and end dates are required")
        try:
            range_start, range_end = day_range(start_date, end_date)
        except ValidationError as e:
            raise InvalidDateRangeError(e.message)
        if range_start > range_end:
            raise InvalidDateRangeError("Start date must not be after end date")

        filters = [Sale.sale_date >= range_start, Sale.sale_date <= range_end]
        if customer_id:
            filters.append(Sale.customer_id == customer_id)
        if product_id:
            filters.append(Sale.product_id == product_id)

        sales = (
            db.query(Sale)
            .filter(*filters)
            .order_by(Sale.sale_date.desc(), Sale.id.desc())
            .all()
        )

        products = self._products_by_id(s.product_id for s in sales)
        customers = self._customers_by_id(s.customer_id for s in sales if s.customer_id)

        rows = []
        total_revenue = total_cost = total_discount = ZERO
        total_items = 0
        for sale in sales:
            product = products.get(sale.product_id)
            customer = customers.get(sale.customer_id) if sale.customer_id else None

            amount = to_money(sale.total_amount)
            cost_price = to_money(product.cost_price) if product else ZERO
            cost = to_money(cost_price * sale.quantity)

            total_revenue += amount
            total_cost += cost
            total_discount += to_money(sale.discount)
            total_items += sale.quantity

            if sale.customer_id is None:
                customer_name = WALK_IN_CUSTOMER
            else:
                customer_name = customer.name if customer else CUSTOMER_NOT_FOUND

            rows.append({
                "id": sale.id,
                "date": format_calendar_date(sale.sale_date),
                "product_name": product.name if product else PRODUCT_NOT_FOUND,
                "product_category": product.category if product else "",
                "customer_name": customer_name,
                "customer_email": customer.email if customer else None,
                "customer_phone": customer.phone if customer else None,
                "customer_city": customer.city if customer else None,
                "customer_state": customer.state if customer else None,
                "quantity": sale.quantity,
                "unit_price": to_money(sale.unit_price),
                "discount": to_money(sale.discount),
                "total_amount": amount,
                "cost_price": cost_price,
                "profit": amount - cost,
                "notes": sale.notes,
            })

        total_profit = total_revenue - total_cost

        report = {
            "start_date": format_calendar_date(range_start),
            "end_date": format_calendar_date(range_end),
            "summary": {
                "total_sales": len(sales),
                "total_revenue": total_revenue,
                "total_cost": total_cost,
                "total_profit": total_profit,
                "total_items": total_items,
                "total_discount": total_discount,
                "profit_margin": profit_margin(total_profit, total_revenue),
            },
            "sales": rows,
            "customer_stats": self._customer_stats(filters),
            "product_stats": self._product_stats(filters),
        }
        logger.info(
            f"Report {report['start_date']}..{report['end_date']}: {len(sales)} sale(s)"
        )
        return report

    def get_dashboard(self, now: Optional[datetime] = None) -> dict:
        """
        Dashboard figures relative to ``now`` (defaults to the current UTC time).

        Returns:
            Dictionary matching the DashboardResponse schema
        """
        db = self._require_db()
        now = now or utc_now()

        today = start_of_day(now)
        month_start = start_of_month(now)
        thirty_days_ago = days_ago(now, TOP_WINDOW_DAYS)
        seven_days_ago = days_ago(now, DAILY_WINDOW_DAYS)

        today_revenue = self._revenue_since(today)
        month_revenue = self._revenue_since(month_start)

        total_customers = (
            db.query(func.count(Customer.id)).filter(Customer.is_active.is_(True)).scalar()
        )

        revenue = func.sum(Sale.total_amount).label("revenue")
        quantity = func.sum(Sale.quantity).label("quantity")

        top_product_rows = (
            db.query(Sale.product_id, quantity, revenue)
            .filter(Sale.sale_date >= thirty_days_ago)
            .group_by(Sale.product_id)
            .order_by(revenue.desc())
            .limit(TOP_LIMIT)
            .all()
        )
        products = self._products_by_id(row.product_id for row in top_product_rows)
        top_products = []
        for row in top_product_rows:
            product = products.get(row.product_id)
            top_products.append({
                "product_id": row.product_id,
                "name": product.name if product else PRODUCT_NOT_FOUND,
                "category": product.category if product else "",
                "total_sold": int(row.quantity or 0),
                "revenue": to_money(row.revenue),
            })

        top_customer_rows = (
            db.query(Sale.customer_id, quantity, revenue)
            .filter(Sale.sale_date >= thirty_days_ago, Sale.customer_id.isnot(None))
            .group_by(Sale.customer_id)
            .order_by(revenue.desc())
            .limit(TOP_LIMIT)
            .all()
        )
        customers = self._customers_by_id(row.customer_id for row in top_customer_rows)
        top_customers = []
        for row in top_customer_rows:
            customer = customers.get(row.customer_id)
            top_customers.append({
                "customer_id": row.customer_id,
                "name": customer.name if customer else CUSTOMER_NOT_FOUND,
                "email": customer.email if customer else None,
                "total_spent": to_money(row.revenue),
                "total_items": int(row.quantity or 0),
            })

        low_stock = ProductService(db).low_stock(settings.LOW_STOCK_THRESHOLD)

        sales_count = func.count(Sale.id).label("sales_count")
        daily_rows = (
            db.query(Sale.sale_date, revenue, sales_count)
            .filter(Sale.sale_date >= seven_days_ago)
            .group_by(Sale.sale_date)
            .order_by(Sale.sale_date.asc())
            .all()
        )

        return {
            "today_revenue": today_revenue,
            "month_revenue": month_revenue,
            "total_customers": total_customers or 0,
            "top_products": top_products,
            "top_customers": top_customers,
            "low_stock_products": [
                {
                    "id": p.id,
                    "name": p.name,
                    "category": p.category,
                    "stock_quantity": p.stock_quantity,
                }
                for p in low_stock
            ],
            "daily_sales": [
                {
                    "date": format_calendar_date(row.sale_date),
                    "revenue": to_money(row.revenue),
                    "sales_count": row.sales_count,
                }
                for row in daily_rows
            ],
        }

    def _revenue_since(self, since: datetime) -> Decimal:
        total = (
            self.db.query(func.sum(Sale.total_amount))
            .filter(Sale.sale_date >= since)
            .scalar()
        )
        return to_money(total)

    def _customer_stats(self, filters: list) -> list:
        spent = func.sum(Sale.total_amount).label("total_spent")
        items = func.sum(Sale.quantity).label("total_items")
        count = func.count(Sale.id).label("sales_count")
        rows = (
            self.db.query(Sale.customer_id, spent, items, count)
            .filter(*filters, Sale.customer_id.isnot(None))
            .group_by(Sale.customer_id)
            .all()
        )

        customers = self._customers_by_id(row.customer_id for row in rows)
        stats = []
        for row in rows:
            customer = customers.get(row.customer_id)
            stats.append({
                "customer_id": row.customer_id,
                "name": customer.name if customer else CUSTOMER_NOT_FOUND,
                "email": customer.email if customer else None,
                "phone": customer.phone if customer else None,
                "city": customer.city if customer else None,
                "state": customer.state if customer else None,
                "total_spent": to_money(row.total_spent),
                "total_items": int(row.total_items or 0),
                "sales_count": row.sales_count,
            })
        return sorted(stats, key=lambda s: s["total_spent"], reverse=True)

    def _product_stats(self, filters: list) -> list:
        sold = func.sum(Sale.quantity).label("total_sold")
        revenue = func.sum(Sale.total_amount).label("total_revenue")
        count = func.count(Sale.id).label("sales_count")
        rows = (
            self.db.query(Sale.product_id, sold, revenue, count)
            .filter(*filters)
            .group_by(Sale.product_id)
            .all()
        )

        products = self._products_by_id(row.product_id for row in rows)
        stats = []
        for row in rows:
            product = products.get(row.product_id)
            stats.append({
                "product_id": row.product_id,
                "name": product.name if product else PRODUCT_NOT_FOUND,
                "category": product.category if product else "",
                "total_sold": int(row.total_sold or 0),
                "total_revenue": to_money(row.total_revenue),
                "sales_count": row.sales_count,
            })
        return sorted(stats, key=lambda s: s["total_revenue"], reverse=True)

    def _products_by_id(self, ids: Iterable[int]) -> Dict[int, Product]:
        ids = set(ids)
        if not ids:
            return {}
        return {p.id: p for p in self.db.query(Product).filter(Product.id.in_(ids)).all()}

    def _customers_by_id(self, ids: Iterable[int]) -> Dict[int, Customer]:
        ids = set(ids)
        if not ids:
            return {}
        return {c.id: c for c in self.db.query(Customer).filter(Customer.id.in_(ids)).all()}
