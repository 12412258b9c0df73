"""Tests for production (restock) endpoints."""


def test_record_production_increments_stock(client, create_product):
    """10 in stock, produce 4: stock becomes 14 and a history row is added."""
    product_id = create_product(stock_quantity=10)["id"]

    response = client.post(
        f"/api/v1/products/{product_id}/production",
        json={"quantity": 4, "production_date": "2024-05-02", "notes": "Morning batch"}
    )

    assert response.status_code == 201
    data = response.json()
    assert data["message"] == "Production of 4 unit(s) recorded"
    assert data["product"]["stock_quantity"] == 14
    assert data["production_record"]["product_id"] == product_id
    assert data["production_record"]["quantity"] == 4
    assert data["production_record"]["notes"] == "Morning batch"
    assert data["production_record"]["production_date"].startswith("2024-05-02T00:00:00")


def test_record_production_invalid_quantity(client, create_product):
    product_id = create_product(stock_quantity=10)["id"]

    response = client.post(f"/api/v1/products/{product_id}/production", json={"quantity": 0})

    assert response.status_code == 422
    product = client.get(f"/api/v1/products/{product_id}").json()
    assert product["stock_quantity"] == 10


def test_record_production_product_not_found(client):
    response = client.post("/api/v1/products/9999/production", json={"quantity": 3})

    assert response.status_code == 404


def test_production_history_most_recent_first(client, create_product):
    product_id = create_product()["id"]
    for day, quantity in (("2024-01-10", 1), ("2024-03-01", 2), ("2024-02-05", 3)):
        client.post(
            f"/api/v1/products/{product_id}/production",
            json={"quantity": quantity, "production_date": day}
        )

    response = client.get(f"/api/v1/products/{product_id}/production")

    assert response.status_code == 200
    history = response.json()
    assert [h["quantity"] for h in history] == [2, 3, 1]


def test_production_history_product_not_found(client):
    response = client.get("/api/v1/products/9999/production")

    assert response.status_code == 404


def test_top_production_ranking(client, create_product):
    company = client.post("/api/v1/companies/", json={"name": "Acme"}).json()
    low = create_product(name="Low")["id"]
    high = create_product(name="High", company_id=company["id"])["id"]
    create_product(name="Never produced")

    client.post(f"/api/v1/products/{low}/production", json={"quantity": 2})
    client.post(f"/api/v1/products/{high}/production", json={"quantity": 5})
    client.post(f"/api/v1/products/{high}/production", json={"quantity": 5})

    response = client.get("/api/v1/products/top-production")

    assert response.status_code == 200
    ranking = response.json()
    assert [item["name"] for item in ranking] == ["High", "Low"]
    assert ranking[0]["total_produced"] == 10
    assert ranking[0]["company"] == {"id": company["id"], "name": "Acme"}
    assert ranking[1]["company"] is None
