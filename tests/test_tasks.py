"""Tests for the background stock tasks, called in-process."""
from unittest.mock import patch

from stock_ledger.models.product import Product
from stock_ledger.tasks.celery_app import celery_app
from stock_ledger.tasks.stock_tasks import check_low_stock, reconcile_stock


def test_check_low_stock_flags_product(client, create_product):
    product_id = create_product(stock_quantity=2)["id"]

    result = check_low_stock(product_id)

    assert result["status"] == "low_stock"
    assert result["stock_quantity"] == 2
    assert result["threshold"] == 5


def test_check_low_stock_ok(client, create_product):
    product_id = create_product(stock_quantity=50)["id"]

    assert check_low_stock(product_id)["status"] == "ok"


def test_check_low_stock_missing_product(client):
    assert check_low_stock(9999)["status"] == "failed"


def test_check_low_stock_without_database():
    with patch("stock_ledger.tasks.stock_tasks.SessionLocal", None):
        result = check_low_stock(1)

    assert result["status"] == "failed"


def test_reconcile_stock_consistent(client, create_product, record_sale):
    product_id = create_product(stock_quantity=10)["id"]
    record_sale(product_id=product_id, quantity=4, unit_price=1.00)
    client.post(f"/api/v1/products/{product_id}/production", json={"quantity": 2})

    result = reconcile_stock()

    assert result["status"] == "consistent"
    assert result["checked"] == 1
    assert result["mismatches"] == []


def test_reconcile_stock_reports_mismatch(client, db_session, create_product):
    product_id = create_product(stock_quantity=10)["id"]
    product = db_session.query(Product).filter(Product.id == product_id).first()
    product.stock_quantity = 7
    db_session.commit()

    result = reconcile_stock(product_id)

    assert result["status"] == "mismatch"
    assert result["mismatches"][0]["expected_stock"] == 10
    assert result["mismatches"][0]["stock_quantity"] == 7


def test_reconciliation_is_scheduled_nightly():
    entry = celery_app.conf.beat_schedule["reconcile-stock-nightly"]

    assert entry["task"] == "reconcile_stock"
    assert entry["task"] in celery_app.tasks
    assert entry["schedule"].hour == {3}
    assert entry["schedule"].minute == {0}
