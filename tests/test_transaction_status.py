import uuid


def test_lookup_by_primary_id(client, auth_headers, make_order):
    order = make_order(custom_order_id="ORD_PK", status="success", amount=320)

    body = client.get(
        f"/orders/transaction-status/{order.id}", headers=auth_headers
    ).json()
    assert body["success"] is True
    tx = body["transaction"]
    assert tx["id"] == str(order.id)
    assert tx["custom_order_id"] == "ORD_PK"
    assert tx["status"] == "success"
    assert tx["order_amount"] == 320
    assert tx["trustee_id"] == "trustee-1"
    assert tx["gateway_name"] == "Edviron"


def test_lookup_by_custom_order_id(client, auth_headers, make_order):
    order = make_order(custom_order_id="ORD_CUSTOM")

    body = client.get(
        "/orders/transaction-status/ORD_CUSTOM", headers=auth_headers
    ).json()
    assert body["success"] is True
    assert body["transaction"]["id"] == str(order.id)


def test_uuid_shaped_custom_id_falls_back(client, auth_headers, make_order):
    custom = str(uuid.uuid4())
    order = make_order(custom_order_id=custom)

    body = client.get(f"/orders/transaction-status/{custom}", headers=auth_headers).json()
    assert body["success"] is True
    assert body["transaction"]["id"] == str(order.id)


def test_not_found_is_structured(client, auth_headers):
    missing = str(uuid.uuid4())
    resp = client.get(f"/orders/transaction-status/{missing}", headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json() == {
        "success": False,
        "message": "Transaction not found",
        "transaction_id": missing,
    }


def test_missing_status_row_gets_defaults(client, auth_headers, make_order):
    order = make_order(custom_order_id="ORD_BARE", with_status=False)

    tx = client.get(
        "/orders/transaction-status/ORD_BARE", headers=auth_headers
    ).json()["transaction"]
    assert tx["status"] == "pending"
    assert tx["payment_mode"] == "pending"
    assert tx["order_amount"] == 0
    assert tx["transaction_amount"] == 0
    assert tx["bank_reference"] == ""
    assert tx["error_message"] == ""
    assert tx["payment_time"] == tx["created_at"]
    assert tx["id"] == str(order.id)


def test_requires_auth(client):
    assert client.get("/orders/transaction-status/ORD_X").status_code == 401
