"""Tests for stock ledger consistency and unavailable mode."""
import pytest

from stock_ledger.database import get_db
from stock_ledger.exceptions import ServiceUnavailableError
from stock_ledger.main import app
from stock_ledger.schemas.sale import SaleCreate
from stock_ledger.services.report_service import ReportService
from stock_ledger.services.sale_service import SaleService


def test_stock_matches_ledger_after_mixed_operations(client, create_product, create_customer, record_sale):
    """Stock always equals initial stock + production - sales."""
    product_id = create_product(stock_quantity=5)["id"]
    customer_id = create_customer()["id"]

    sale_ids = []
    for quantity in (2, 3):
        response = record_sale(product_id=product_id, customer_id=customer_id, quantity=quantity, unit_price=4.00)
        sale_ids.append(response.json()["id"])
    # Out of stock: rejected, nothing written
    assert record_sale(product_id=product_id, quantity=1, unit_price=4.00).status_code == 400

    client.post(f"/api/v1/products/{product_id}/production", json={"quantity": 7})
    client.delete(f"/api/v1/sales/{sale_ids[0]}")
    record_sale(product_id=product_id, quantity=6, unit_price=4.00)
    client.delete(f"/api/v1/customers/{customer_id}")

    ledger = client.get(f"/api/v1/products/{product_id}/ledger").json()

    assert ledger["total_produced"] == 7
    assert ledger["total_sold"] == 9
    assert ledger["stock_quantity"] == 3
    assert ledger["consistent"] is True


def test_services_without_database_are_unavailable():
    with pytest.raises(ServiceUnavailableError):
        SaleService(None).record_sale(SaleCreate(product_id=1, quantity=1, unit_price=1))

    with pytest.raises(ServiceUnavailableError):
        SaleService(None).delete_sale(1)

    with pytest.raises(ServiceUnavailableError):
        ReportService(None).generate_report("2024-01-01", "2024-01-31")


@pytest.fixture
def no_database(client):
    def _no_db():
        yield None

    app.dependency_overrides[get_db] = _no_db
    yield client
    app.dependency_overrides.pop(get_db, None)


def test_api_returns_503_without_database(no_database):
    sale = no_database.post("/api/v1/sales/", json={"product_id": 1, "quantity": 1, "unit_price": 1.00})
    report = no_database.get("/api/v1/reports?start_date=2024-01-01&end_date=2024-01-31")
    dashboard = no_database.get("/api/v1/dashboard")

    assert sale.status_code == 503
    assert report.status_code == 503
    assert dashboard.status_code == 503
    assert "unavailable" in sale.json()["detail"]
