from decimal import Decimal


def test_create_item(client):
    response = client.post("/api/item", json={"name": "Mouse", "price": "12.50", "createdBy": 7})
    assert response.status_code == 201
    body = response.json()
    assert body["name"] == "Mouse"
    assert Decimal(str(body["price"])) == Decimal("12.50")
    assert body["createdBy"] == 7
    assert body["updatedBy"] is None
    assert body["updatedAt"] is None
    assert response.headers["location"].endswith(f"/api/item/{body['id']}")


def test_create_item_defaults_creator(client):
    body = client.post("/api/item", json={"name": "Mouse", "price": 3}).json()
    assert body["createdBy"] == 1


def test_item_price_must_be_positive_with_two_decimals(client):
    assert client.post("/api/item", json={"name": "Free", "price": 0}).status_code == 400
    assert client.post("/api/item", json={"name": "Neg", "price": -1}).status_code == 400
    assert client.post("/api/item", json={"name": "Fine", "price": "1.234"}).status_code == 400


def test_update_item(client, create_item):
    item = create_item()
    response = client.put(f"/api/item/{item['id']}", json={"name": "Keyboard Pro", "price": "15.00", "updatedBy": 3})
    assert response.status_code == 204
    body = client.get(f"/api/item/{item['id']}").json()
    assert body["name"] == "Keyboard Pro"
    assert Decimal(str(body["price"])) == Decimal("15.00")
    assert body["updatedBy"] == 3
    assert body["updatedAt"] is not None
    assert body["createdAt"] == item["createdAt"]


def test_missing_item_returns_404(client):
    assert client.get("/api/item/77").status_code == 404
    assert client.put("/api/item/77", json={"name": "X", "price": 1}).status_code == 404
    assert client.delete("/api/item/77").status_code == 404


def test_list_and_delete_items(client, create_item):
    first = create_item(name="A")
    second = create_item(name="B")
    assert [i["id"] for i in client.get("/api/item").json()] == [first["id"], second["id"]]
    assert client.delete(f"/api/item/{first['id']}").status_code == 204
    assert [i["id"] for i in client.get("/api/item").json()] == [second["id"]]


def test_item_used_by_an_order_cannot_be_deleted(client, create_person, create_item):
    person = create_person()
    item = create_item()
    client.post(
        "/api/orders",
        json={"personId": person["id"], "orderDetails": [{"itemId": item["id"], "quantity": 2}]},
    )
    assert client.delete(f"/api/item/{item['id']}").status_code == 400


def test_non_positive_audit_users_fall_back_to_default_user(client):
    body = client.post("/api/item", json={"name": "Mouse", "price": 3, "createdBy": 0}).json()
    assert body["createdBy"] == 1
    assert client.put(f"/api/item/{body['id']}", json={"name": "Mouse", "price": 3, "updatedBy": -2}).status_code == 204
    assert client.get(f"/api/item/{body['id']}").json()["updatedBy"] == 1


def test_items_are_served_under_the_singular_path(client, create_item):
    item = create_item()
    assert client.get(f"/api/item/{item['id']}").status_code == 200
    assert client.get("/api/items").status_code == 404
