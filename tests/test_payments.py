import re
import uuid

from schoolpay.models.order import Order
from schoolpay.models.order_status import OrderStatus
from schoolpay.services.gateway import GatewayError
from schoolpay.services.payments import new_custom_order_id

STUDENT = {"name": "A", "id": "S1", "email": "a@x.com"}


def _create(client, headers, **body):
    payload = {"amount": 500, "student_info": STUDENT}
    payload.update(body)
    return client.post("/orders/create-payment", json=payload, headers=headers)


def test_custom_order_id_format():
    assert re.fullmatch(r"ORD_\d{13}_[0-9a-z]{9}", new_custom_order_id())


def test_create_payment_opens_pending_order(client, auth_headers, gateway, session_factory):
    resp = _create(client, auth_headers)
    assert resp.status_code == 201, resp.text
    body = resp.json()

    assert body["success"] is True
    assert body["order"]["custom_order_id"].startswith("ORD_")
    assert body["order"]["amount"] == 500
    assert body["order"]["student_info"] == STUDENT
    assert body["payment_url"] == "https://pay.example.test/collect/CR0001"
    assert body["collect_request_id"] == "CR0001"
    assert body["payment_gateway_response"]["collect_request_id"] == "CR0001"
    assert gateway.calls == [(500, None)]

    with session_factory() as s:
        order = s.query(Order).filter(Order.id == uuid.UUID(body["order"]["id"])).one()
        assert order.custom_order_id == body["order"]["custom_order_id"]
        assert order.school_id == "65b0e6293e9f76a9694d84b4"
        assert order.trustee_id == "65b0e552dd31950a9b41c5ba"
        assert order.gateway_name == "Edviron"
        assert order.collect_request_id == "CR0001"

        st = s.query(OrderStatus).filter(OrderStatus.collect_id == order.id).one()
        assert st.status == "pending"
        assert st.payment_mode == "pending"
        assert st.order_amount == 500
        assert st.transaction_amount == 500


def test_create_payment_passes_callback_and_trustee(client, auth_headers, gateway, session_factory):
    resp = _create(
        client,
        auth_headers,
        callback_url="https://school.example.test/paid",
        trustee_id="trustee-42",
    )
    assert resp.status_code == 201, resp.text
    assert gateway.calls == [(500, "https://school.example.test/paid")]

    with session_factory() as s:
        order = s.query(Order).one()
        assert order.trustee_id == "trustee-42"


def test_custom_order_ids_are_unique(client, auth_headers, session_factory):
    ids = set()
    for _ in range(15):
        resp = _create(client, auth_headers)
        assert resp.status_code == 201
        ids.add(resp.json()["order"]["custom_order_id"])
    assert len(ids) == 15

    with session_factory() as s:
        assert s.query(Order).count() == 15


def test_gateway_failure_marks_creation_failed(client, auth_headers, gateway, session_factory):
    gateway.error = GatewayError("gateway returned 401: invalid api key", 401)

    resp = _create(client, auth_headers)
    assert resp.status_code == 400
    body = resp.json()
    assert body["success"] is False
    assert "invalid api key" in body["detail"]

    # provisional rows stay, flagged instead of silently pending
    with session_factory() as s:
        order = s.query(Order).one()
        assert order.collect_request_id is None
        st = s.query(OrderStatus).filter(OrderStatus.collect_id == order.id).one()
        assert st.status == "creation_failed"
        assert "invalid api key" in st.error_message


def test_create_payment_requires_auth(client, gateway):
    resp = _create(client, {})
    assert resp.status_code == 401
    assert gateway.calls == []


def test_create_payment_rejects_bad_amount(client, auth_headers, gateway):
    resp = _create(client, auth_headers, amount=0)
    assert resp.status_code == 422
    assert gateway.calls == []


def test_create_payment_rejects_unknown_fields(client, auth_headers, gateway):
    resp = _create(client, auth_headers, discount=10)
    assert resp.status_code == 422
