import os

# Point the app at in-memory SQLite before anything reads the settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CACHE_ENABLED"] = "false"
os.environ["CELERY_BROKER_URL"] = "memory://"
os.environ["CELERY_RESULT_BACKEND"] = "cache+memory://"

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from stock_ledger.main import app
from stock_ledger.database import Base, engine, SessionLocal


@pytest.fixture(scope="function")
def client():
    """Create test client with fresh database for each test."""
    # Create tables
    Base.metadata.create_all(bind=engine)

    with TestClient(app) as test_client:
        yield test_client

    # Drop tables after test
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """Create database session for direct database access in tests."""
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()

    yield session

    session.close()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def create_product(client):
    """Create a product through the API and return its JSON."""
    def _create(**overrides):
        payload = {
            "name": "Test Product",
            "category": "General",
            "cost_price": 8.00,
            "sale_price": 20.00,
            "stock_quantity": 10,
        }
        payload.update(overrides)
        response = client.post("/api/v1/products/", json=payload)
        assert response.status_code == 201, response.text
        return response.json()
    return _create


@pytest.fixture
def create_customer(client):
    """Create a customer through the API and return its JSON."""
    def _create(**overrides):
        payload = {"name": "Test Customer", "email": "customer@example.com"}
        payload.update(overrides)
        response = client.post("/api/v1/customers/", json=payload)
        assert response.status_code == 201, response.text
        return response.json()
    return _create


@pytest.fixture
def record_sale(client):
    """Record a sale through the API (low-stock task not enqueued) and return the response."""
    def _record(**payload):
        with patch("stock_ledger.api.sales.check_low_stock.delay"):
            return client.post("/api/v1/sales/", json=payload)
    return _record
