"""Tests for Order API endpoints."""


def create_product(client, name="Test Product", price=10.00):
    response = client.post(
        "/api/v1/products/",
        json={"name": name, "price": price, "count_in_stock": 10}
    )
    return response.json()["id"]


def order_payload(*product_ids):
    return {
        "payment_method": "card",
        "tax_price": 1.50,
        "shipping_price": 4.00,
        "total_price": 25.50,
        "items": [
            {"name": f"Item {i}", "quantity": i + 1, "price": 10.00, "product_id": product_id}
            for i, product_id in enumerate(product_ids)
        ]
    }


def test_create_order_success(client):
    """Test creating an order with two items."""
    first = create_product(client, "First")
    second = create_product(client, "Second")

    response = client.post("/api/v1/orders/", json=order_payload(first, second))

    assert response.status_code == 201
    data = response.json()
    assert data["id"] > 0
    assert data["payment_method"] == "card"
    assert len(data["items"]) == 2
    for item in data["items"]:
        assert item["id"] > 0
        assert item["order_id"] == data["id"]
    assert [item["product_id"] for item in data["items"]] == [first, second]


def test_create_order_unknown_product_stores_nothing(client):
    """A rejected second item leaves no order behind."""
    product_id = create_product(client)

    response = client.post("/api/v1/orders/", json=order_payload(product_id, 9999))

    assert response.status_code == 500
    assert response.json()["detail"] == "create order failed"
    assert client.get("/api/v1/orders/").json() == []


def test_create_order_invalid_quantity(client):
    product_id = create_product(client)
    payload = order_payload(product_id)
    payload["items"][0]["quantity"] = 0

    response = client.post("/api/v1/orders/", json=payload)

    assert response.status_code == 422


def test_get_order(client):
    """Test getting an order by ID."""
    product_id = create_product(client)
    order_id = client.post("/api/v1/orders/", json=order_payload(product_id)).json()["id"]

    response = client.get(f"/api/v1/orders/{order_id}")

    assert response.status_code == 200
    data = response.json()
    assert data["id"] == order_id
    assert len(data["items"]) == 1
    assert data["items"][0]["quantity"] == 1


def test_get_order_not_found(client):
    response = client.get("/api/v1/orders/9999")

    assert response.status_code == 404


def test_list_orders(client):
    """Test listing orders with their items."""
    product_id = create_product(client)
    for count in range(1, 4):
        client.post("/api/v1/orders/", json=order_payload(*([product_id] * count)))

    response = client.get("/api/v1/orders/")

    assert response.status_code == 200
    data = response.json()
    assert len(data) == 3
    assert sorted(len(order["items"]) for order in data) == [1, 2, 3]


def test_delete_order(client):
    product_id = create_product(client)
    order_id = client.post("/api/v1/orders/", json=order_payload(product_id)).json()["id"]

    response = client.delete(f"/api/v1/orders/{order_id}")

    assert response.status_code == 204
    assert client.get(f"/api/v1/orders/{order_id}").status_code == 404
    # The product is no longer referenced and can be removed
    assert client.delete(f"/api/v1/products/{product_id}").status_code == 204
