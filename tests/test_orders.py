from decimal import Decimal


def money(value):
    return Decimal(str(value))


def order_payload(person_id, *lines, created_by=1):
    return {
        "personId": person_id,
        "createdBy": created_by,
        "orderDetails": [{"itemId": item_id, "quantity": qty} for item_id, qty in lines],
    }


def test_create_order_computes_line_and_grand_totals(client, create_person, create_item):
    person = create_person()
    item = create_item(price="10.00")
    response = client.post("/api/orders", json=order_payload(person["id"], (item["id"], 2)))
    assert response.status_code == 201
    body = response.json()
    assert money(body["total"]) == Decimal("20.00")
    assert len(body["orderDetails"]) == 1
    line = body["orderDetails"][0]
    assert line["itemId"] == item["id"]
    assert line["itemName"] == "Keyboard"
    assert line["quantity"] == 2
    assert money(line["price"]) == Decimal("10.00")
    assert money(line["total"]) == Decimal("20.00")
    assert body["personName"] == "Ana Gomez"
    assert body["number"] == 1
    assert response.headers["location"].endswith(f"/api/orders/{body['id']}")


def test_grand_total_sums_every_line(client, create_person, create_item):
    person = create_person()
    a = create_item(name="A", price="10.00")
    b = create_item(name="B", price="2.35")
    c = create_item(name="C", price="0.99")
    body = client.post(
        "/api/orders", json=order_payload(person["id"], (a["id"], 2), (b["id"], 3), (c["id"], 7))
    ).json()
    assert [money(line["total"]) for line in body["orderDetails"]] == [
        Decimal("20.00"), Decimal("7.05"), Decimal("6.93"),
    ]
    assert money(body["total"]) == Decimal("33.98")


def test_line_price_is_a_snapshot_of_the_item_price(client, create_person, create_item):
    person = create_person()
    item = create_item(price="10.00")
    order = client.post("/api/orders", json=order_payload(person["id"], (item["id"], 3))).json()

    client.put(f"/api/item/{item['id']}", json={"name": "Keyboard", "price": "99.99"})

    stored = client.get(f"/api/orders/{order['id']}").json()
    assert money(stored["orderDetails"][0]["price"]) == Decimal("10.00")
    assert money(stored["total"]) == Decimal("30.00")


def test_request_price_is_ignored(client, create_person, create_item):
    person = create_person()
    item = create_item(price="10.00")
    payload = {
        "personId": person["id"],
        "orderDetails": [{"itemId": item["id"], "quantity": 1, "price": "0.01"}],
    }
    body = client.post("/api/orders", json=payload).json()
    assert money(body["orderDetails"][0]["price"]) == Decimal("10.00")


def test_missing_item_is_rejected_and_nothing_is_written(client, create_person, create_item):
    person = create_person()
    item = create_item()
    response = client.post("/api/orders", json=order_payload(person["id"], (item["id"], 1), (999, 1)))
    assert response.status_code == 400
    assert "999" in response.json()["detail"]
    assert client.get("/api/orders").json() == []


def test_missing_person_is_rejected(client, create_item):
    item = create_item()
    response = client.post("/api/orders", json=order_payload(4242, (item["id"], 1)))
    assert response.status_code == 400
    assert client.get("/api/orders").json() == []


def test_order_requires_lines_and_positive_quantities(client, create_person, create_item):
    person = create_person()
    item = create_item()
    assert client.post("/api/orders", json=order_payload(person["id"])).status_code == 400
    assert client.post("/api/orders", json=order_payload(person["id"], (item["id"], 0))).status_code == 400
    assert client.post("/api/orders", json={"orderDetails": [{"itemId": item["id"], "quantity": 1}]}).status_code == 400


def test_order_numbers_are_sequential(client, create_person, create_item):
    person = create_person()
    item = create_item()
    numbers = [
        client.post("/api/orders", json=order_payload(person["id"], (item["id"], 1))).json()["number"]
        for _ in range(3)
    ]
    assert numbers == [1, 2, 3]


def test_next_number_follows_the_highest_existing_number(client, create_person, create_item):
    person = create_person()
    item = create_item()
    first = client.post("/api/orders", json=order_payload(person["id"], (item["id"], 1))).json()
    second = client.post("/api/orders", json=order_payload(person["id"], (item["id"], 1))).json()
    client.delete(f"/api/orders/{first['id']}")
    third = client.post("/api/orders", json=order_payload(person["id"], (item["id"], 1))).json()
    assert third["number"] == second["number"] + 1


def test_get_unknown_order_returns_404(client):
    assert client.get("/api/orders/31337").status_code == 404


def test_list_orders_includes_lines_and_totals(client, create_person, create_item):
    ana = create_person()
    luis = create_person(first_name="Luis", last_name="Perez")
    item = create_item(price="4.00")
    client.post("/api/orders", json=order_payload(ana["id"], (item["id"], 1)))
    client.post("/api/orders", json=order_payload(luis["id"], (item["id"], 5)))
    orders = client.get("/api/orders").json()
    assert [o["personName"] for o in orders] == ["Ana Gomez", "Luis Perez"]
    assert [money(o["total"]) for o in orders] == [Decimal("4.00"), Decimal("20.00")]
    assert all(len(o["orderDetails"]) == 1 for o in orders)


def test_update_replaces_the_whole_detail_set(client, create_person, create_item):
    person = create_person()
    a = create_item(name="A", price="1.00")
    b = create_item(name="B", price="2.00")
    c = create_item(name="C", price="3.00")
    order = client.post("/api/orders", json=order_payload(person["id"], (a["id"], 1), (b["id"], 1))).json()
    old_line_ids = {line["id"] for line in order["orderDetails"]}

    response = client.put(f"/api/orders/{order['id']}", json=order_payload(person["id"], (c["id"], 4), created_by=9))
    assert response.status_code == 204

    stored = client.get(f"/api/orders/{order['id']}").json()
    assert [(line["itemId"], line["quantity"]) for line in stored["orderDetails"]] == [(c["id"], 4)]
    assert not old_line_ids & {line["id"] for line in stored["orderDetails"]}
    assert money(stored["total"]) == Decimal("12.00")
    assert stored["number"] == order["number"]
    assert stored["updatedBy"] == 9
    assert stored["updatedAt"] is not None


def test_update_resets_line_audit_fields(client, create_person, create_item):
    person = create_person()
    item = create_item()
    order = client.post("/api/orders", json=order_payload(person["id"], (item["id"], 1), created_by=5)).json()

    client.put(f"/api/orders/{order['id']}", json=order_payload(person["id"], (item["id"], 1), created_by=6))

    line = client.get(f"/api/orders/{order['id']}").json()["orderDetails"][0]
    assert line["createdBy"] == 5
    assert line["updatedBy"] == 6
    assert line["createdAt"] == line["updatedAt"]


def test_update_can_move_order_to_another_person(client, create_person, create_item):
    ana = create_person()
    luis = create_person(first_name="Luis", last_name="Perez")
    item = create_item()
    order = client.post("/api/orders", json=order_payload(ana["id"], (item["id"], 1))).json()
    client.put(f"/api/orders/{order['id']}", json=order_payload(luis["id"], (item["id"], 1)))
    stored = client.get(f"/api/orders/{order['id']}").json()
    assert stored["personId"] == luis["id"]
    assert stored["personName"] == "Luis Perez"


def test_update_with_missing_item_keeps_previous_lines(client, create_person, create_item):
    person = create_person()
    item = create_item()
    order = client.post("/api/orders", json=order_payload(person["id"], (item["id"], 2))).json()
    response = client.put(f"/api/orders/{order['id']}", json=order_payload(person["id"], (999, 1)))
    assert response.status_code == 400
    stored = client.get(f"/api/orders/{order['id']}").json()
    assert stored["orderDetails"] == order["orderDetails"]


def test_update_unknown_order_returns_404(client, create_person, create_item):
    person = create_person()
    item = create_item()
    response = client.put("/api/orders/555", json=order_payload(person["id"], (item["id"], 1)))
    assert response.status_code == 404


def test_delete_order(client, create_person, create_item):
    person = create_person()
    item = create_item()
    order = client.post("/api/orders", json=order_payload(person["id"], (item["id"], 1))).json()
    assert client.delete(f"/api/orders/{order['id']}").status_code == 204
    assert client.get(f"/api/orders/{order['id']}").status_code == 404
    assert client.delete(f"/api/orders/{order['id']}").status_code == 404
    # the item is no longer referenced once the order lines are gone
    assert client.delete(f"/api/item/{item['id']}").status_code == 204


def test_quantity_above_the_int_range_is_rejected(client, create_person, create_item):
    person = create_person()
    item = create_item(price="10.00")
    for qty in (2 ** 70, 10 ** 17 + 3, 2_147_483_648):
        response = client.post("/api/orders", json=order_payload(person["id"], (item["id"], qty)))
        assert response.status_code == 400, qty
    assert client.get("/api/orders").json() == []


def test_line_total_too_large_for_the_money_column_is_rejected(client, create_person, create_item):
    person = create_person()
    item = create_item(price="9999999999.99")
    response = client.post("/api/orders", json=order_payload(person["id"], (item["id"], 2_147_483_647)))
    assert response.status_code == 400
    assert "exceeds" in response.json()["detail"]
    assert client.get("/api/orders").json() == []


def test_order_total_too_large_for_the_money_column_is_rejected(client, create_person, create_item):
    person = create_person()
    item = create_item(price="4000000.00")
    # each line is 8e15 and fits, their sum does not
    payload = order_payload(person["id"], (item["id"], 2_000_000_000), (item["id"], 2_000_000_000))
    assert client.post("/api/orders", json=payload).status_code == 400
    assert client.get("/api/orders").json() == []

    order = client.post("/api/orders", json=order_payload(person["id"], (item["id"], 1))).json()
    assert client.put(f"/api/orders/{order['id']}", json=payload).status_code == 400
    stored = client.get(f"/api/orders/{order['id']}").json()
    assert stored["orderDetails"] == order["orderDetails"]


def test_non_positive_creator_falls_back_to_default_user(client, create_person, create_item):
    person = create_person()
    item = create_item()
    for created_by in (0, -4):
        response = client.post("/api/orders", json=order_payload(person["id"], (item["id"], 1), created_by=created_by))
        assert response.status_code == 201
        body = response.json()
        assert body["createdBy"] == 1
        assert body["orderDetails"][0]["createdBy"] == 1

    order = client.post("/api/orders", json=order_payload(person["id"], (item["id"], 1))).json()
    client.put(f"/api/orders/{order['id']}", json=order_payload(person["id"], (item["id"], 2), created_by=0))
    assert client.get(f"/api/orders/{order['id']}").json()["updatedBy"] == 1


def test_order_json_uses_camel_case_keys(client, create_person, create_item):
    person = create_person()
    item = create_item()
    body = client.post("/api/orders", json=order_payload(person["id"], (item["id"], 1))).json()
    assert {"personId", "personName", "orderDetails", "createdBy", "createdAt", "updatedAt"} <= set(body)
    assert "person_id" not in body
    assert {"itemId", "itemName"} <= set(body["orderDetails"][0])
