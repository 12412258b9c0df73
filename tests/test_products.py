"""Tests for Product API endpoints."""
from unittest.mock import patch


def test_create_product(client):
    """Test creating a new product."""
    response = client.post(
        "/api/v1/products/",
        json={
            "name": "Test Product",
            "category": "Shirts",
            "size": "M",
            "cost_price": 12.50,
            "sale_price": 29.90,
            "stock_quantity": 10
        }
    )

    assert response.status_code == 201
    data = response.json()
    assert data["name"] == "Test Product"
    assert data["sale_price"] == 29.90
    assert data["stock_quantity"] == 10
    assert data["initial_stock"] == 10
    assert data["company_id"] is None
    assert "id" in data
    assert "created_at" in data


def test_create_product_invalid_price(client):
    """Test creating product with invalid price fails."""
    response = client.post(
        "/api/v1/products/",
        json={
            "name": "Test Product",
            "category": "Shirts",
            "cost_price": -10.00,  # Invalid: negative price
            "sale_price": 20.00,
            "stock_quantity": 10
        }
    )

    assert response.status_code == 422  # Validation error


def test_create_product_invalid_stock(client):
    """Test creating product with negative stock fails."""
    response = client.post(
        "/api/v1/products/",
        json={
            "name": "Test Product",
            "category": "Shirts",
            "cost_price": 10.00,
            "sale_price": 20.00,
            "stock_quantity": -5  # Invalid: negative stock
        }
    )

    assert response.status_code == 422


def test_create_product_unknown_company(client):
    response = client.post(
        "/api/v1/products/",
        json={
            "name": "Sourced",
            "category": "Shirts",
            "cost_price": 10.00,
            "sale_price": 20.00,
            "company_id": 999
        }
    )

    assert response.status_code == 404


def test_get_product(client, create_product):
    """Test getting a product by ID."""
    product_id = create_product(name="Lookup")["id"]

    response = client.get(f"/api/v1/products/{product_id}")

    assert response.status_code == 200
    data = response.json()
    assert data["id"] == product_id
    assert data["name"] == "Lookup"


def test_get_product_cached_falls_back_to_database(client, create_product):
    product_id = create_product(stock_quantity=3)["id"]

    response = client.get(f"/api/v1/products/{product_id}/cached")

    assert response.status_code == 200
    assert response.json()["stock_quantity"] == 3


def test_get_product_not_found(client):
    """Test getting non-existent product returns 404."""
    response = client.get("/api/v1/products/9999")

    assert response.status_code == 404
    assert "not found" in response.json()["detail"]


def test_list_products(client, create_product):
    """Test listing products with pagination."""
    for i in range(15):
        create_product(name=f"Product {i}")

    response = client.get("/api/v1/products/?page=1&page_size=10")

    assert response.status_code == 200
    data = response.json()
    assert len(data["items"]) == 10
    assert data["total"] == 15
    assert data["total_pages"] == 2


def test_update_product_keeps_stock(client, create_product):
    """Updating details never touches stock."""
    product_id = create_product(name="Original Name", stock_quantity=10)["id"]

    response = client.put(
        f"/api/v1/products/{product_id}",
        json={"name": "Updated Name", "sale_price": 75.00, "stock_quantity": 500}
    )

    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Updated Name"
    assert data["sale_price"] == 75.00
    assert data["stock_quantity"] == 10


def test_delete_product(client, create_product):
    """Test deleting a product."""
    product_id = create_product(name="To Delete")["id"]

    response = client.delete(f"/api/v1/products/{product_id}")
    assert response.status_code == 204

    get_response = client.get(f"/api/v1/products/{product_id}")
    assert get_response.status_code == 404


def test_delete_product_with_production_history(client, create_product):
    product_id = create_product()["id"]
    client.post(f"/api/v1/products/{product_id}/production", json={"quantity": 5})

    response = client.delete(f"/api/v1/products/{product_id}")

    assert response.status_code == 204


def test_delete_product_with_sales_is_blocked(client, create_product, record_sale):
    product_id = create_product(stock_quantity=5)["id"]
    record_sale(product_id=product_id, quantity=1, unit_price=10.00)

    response = client.delete(f"/api/v1/products/{product_id}")

    assert response.status_code == 409
    assert client.get(f"/api/v1/products/{product_id}").status_code == 200


def test_search_products(client, create_product):
    """Test searching products by name."""
    create_product(name="Apple Pie")
    create_product(name="Banana Bread")
    create_product(name="Apple Tart")

    response = client.get("/api/v1/products/?search=Apple")

    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 2
    assert all("Apple" in item["name"] for item in data["items"])


def test_filter_products_by_category(client, create_product):
    create_product(name="Cake", category="Bakery")
    create_product(name="Soap", category="Cleaning")

    response = client.get("/api/v1/products/?category=Bakery")

    data = response.json()
    assert data["total"] == 1
    assert data["items"][0]["name"] == "Cake"


def test_ledger_balance(client, create_product, record_sale):
    product_id = create_product(stock_quantity=10)["id"]
    client.post(f"/api/v1/products/{product_id}/production", json={"quantity": 4})
    record_sale(product_id=product_id, quantity=3, unit_price=5.00)

    response = client.get(f"/api/v1/products/{product_id}/ledger")

    assert response.status_code == 200
    data = response.json()
    assert data["initial_stock"] == 10
    assert data["total_produced"] == 4
    assert data["total_sold"] == 3
    assert data["expected_stock"] == 11
    assert data["stock_quantity"] == 11
    assert data["consistent"] is True


def test_only_cached_read_fills_cache(client, create_product):
    product_id = create_product(stock_quantity=3)["id"]

    with patch("stock_ledger.services.product_service.cache_service") as cache:
        cache.get.return_value = None
        client.get(f"/api/v1/products/{product_id}")
        client.get(f"/api/v1/products/{product_id}/ledger")
        cache.set.assert_not_called()

        response = client.get(f"/api/v1/products/{product_id}/cached")

    assert response.json()["stock_quantity"] == 3
    cache.set.assert_called_once()
    prefix, key, value = cache.set.call_args.args
    assert (prefix, key) == ("product", str(product_id))
    assert value["stock_quantity"] == 3


def test_cached_read_returns_cache_hit(client, create_product):
    product_id = create_product(stock_quantity=3)["id"]

    with patch("stock_ledger.services.product_service.cache_service") as cache:
        cache.get.return_value = {"id": product_id, "stock_quantity": 42}
        response = client.get(f"/api/v1/products/{product_id}/cached")

    assert response.json()["stock_quantity"] == 42
    cache.set.assert_not_called()
