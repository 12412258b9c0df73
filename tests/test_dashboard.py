"""Tests for the dashboard figures."""
from datetime import datetime, timezone

from stock_ledger.services.report_service import ReportService


NOW = datetime(2024, 3, 20, 15, 30, tzinfo=timezone.utc)


def test_dashboard_endpoint(client):
    response = client.get("/api/v1/dashboard")

    assert response.status_code == 200
    data = response.json()
    assert data["today_revenue"] == 0.0
    assert data["top_products"] == []
    assert data["daily_sales"] == []


def test_dashboard_revenue_windows(client, db_session, create_product, record_sale):
    product_id = create_product(stock_quantity=50)["id"]
    record_sale(product_id=product_id, quantity=1, unit_price=10.00, sale_date="2024-03-20")
    record_sale(product_id=product_id, quantity=1, unit_price=20.00, sale_date="2024-03-02")
    record_sale(product_id=product_id, quantity=1, unit_price=40.00, sale_date="2024-02-28")

    dashboard = ReportService(db_session).get_dashboard(now=NOW)

    assert dashboard["today_revenue"] == 10
    assert dashboard["month_revenue"] == 30


def test_dashboard_top_lists(client, db_session, create_product, create_customer, record_sale):
    mug = create_product(name="Mug", stock_quantity=50)["id"]
    pan = create_product(name="Pan", stock_quantity=50)["id"]
    ana = create_customer(name="Ana")["id"]
    create_customer(name="Inactive", is_active=False)
    record_sale(product_id=mug, customer_id=ana, quantity=3, unit_price=5.00, sale_date="2024-03-19")
    record_sale(product_id=pan, quantity=1, unit_price=80.00, sale_date="2024-03-10")
    # Outside the 30-day window
    record_sale(product_id=mug, quantity=10, unit_price=50.00, sale_date="2024-01-05")

    dashboard = ReportService(db_session).get_dashboard(now=NOW)

    assert dashboard["total_customers"] == 1
    assert [p["name"] for p in dashboard["top_products"]] == ["Pan", "Mug"]
    assert dashboard["top_products"][1]["total_sold"] == 3
    assert len(dashboard["top_customers"]) == 1
    assert dashboard["top_customers"][0]["name"] == "Ana"
    assert dashboard["top_customers"][0]["total_spent"] == 15


def test_dashboard_low_stock_and_daily_series(client, db_session, create_product, record_sale):
    scarce = create_product(name="Scarce", stock_quantity=6)["id"]
    create_product(name="Plenty", stock_quantity=100)
    record_sale(product_id=scarce, quantity=2, unit_price=10.00, sale_date="2024-03-18")
    record_sale(product_id=scarce, quantity=1, unit_price=10.00, sale_date="2024-03-18")
    record_sale(product_id=scarce, quantity=1, unit_price=5.00, sale_date="2024-03-20")
    record_sale(product_id=scarce, quantity=1, unit_price=5.00, sale_date="2024-03-01")

    dashboard = ReportService(db_session).get_dashboard(now=NOW)

    assert [p["name"] for p in dashboard["low_stock_products"]] == ["Scarce"]
    assert dashboard["low_stock_products"][0]["stock_quantity"] == 1
    assert dashboard["daily_sales"] == [
        {"date": "2024-03-18", "revenue": 30, "sales_count": 2},
        {"date": "2024-03-20", "revenue": 5, "sales_count": 1},
    ]
