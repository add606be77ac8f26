import logging
import secrets
import string
import time

from sqlalchemy.orm import Session

from schoolpay.core.clock import utcnow
from schoolpay.core.config import Settings
from schoolpay.core.errors import PaymentCreationFailed
from schoolpay.models.order import Order
from schoolpay.models.order_status import (
    CREATION_FAILED,
    ERROR_MESSAGE_MAX,
    PENDING,
    OrderStatus,
)
from schoolpay.schemas.order import CreatedOrderOut, CreatePaymentIn, CreatePaymentOut
from schoolpay.services.gateway import GatewayClient, GatewayError

logger = logging.getLogger("app.payments")

_B36 = string.digits + string.ascii_lowercase


def new_custom_order_id() -> str:
    """ORD_<epoch millis>_<9 random base36 chars>."""
    millis = int(time.time() * 1000)
    suffix = "".join(secrets.choice(_B36) for _ in range(9))
    return f"ORD_{millis}_{suffix}"


def _open_order(db: Session, settings: Settings, payload: CreatePaymentIn) -> Order:
    order = Order(
        custom_order_id=new_custom_order_id(),
        school_id=settings.SCHOOL_ID,
        trustee_id=payload.trustee_id or settings.DEFAULT_TRUSTEE_ID,
        student_info=payload.student_info.model_dump(),
        gateway_name=settings.GATEWAY_NAME,
    )
    db.add(order)
    db.flush()

    db.add(
        OrderStatus(
            collect_id=order.id,
            order_amount=payload.amount,
            transaction_amount=payload.amount,
            payment_mode="pending",
            payment_details="Payment initiated",
            bank_reference="",
            payment_message="Payment in progress",
            status=PENDING,
            error_message="",
            payment_time=utcnow(),
        )
    )
    db.commit()
    return order


def _mark_creation_failed(db: Session, order: Order, detail: str) -> None:
    db.query(OrderStatus).filter(OrderStatus.collect_id == order.id).update(
        {
            "status": CREATION_FAILED,
            "payment_message": "Payment creation failed",
            "error_message": detail[:ERROR_MESSAGE_MAX],
        }
    )
    db.commit()


def create_payment(
    db: Session,
    settings: Settings,
    gateway: GatewayClient,
    payload: CreatePaymentIn,
) -> CreatePaymentOut:
    """
    Opens an order and asks the gateway for a collect URL.

    The order and its pending status are committed before the gateway call.
    If the gateway fails they stay in place with status=creation_failed and
    PaymentCreationFailed is raised.
    """
    order = _open_order(db, settings, payload)
    logger.info(
        "order opened id=%s custom_order_id=%s amount=%s",
        order.id,
        order.custom_order_id,
        payload.amount,
    )

    callback_url = str(payload.callback_url) if payload.callback_url else None
    try:
        gw = gateway.create_collect_request(payload.amount, callback_url)
    except GatewayError as e:
        logger.warning(
            "collect request failed custom_order_id=%s: %s",
            order.custom_order_id,
            e.detail,
        )
        _mark_creation_failed(db, order, e.detail)
        raise PaymentCreationFailed(e.detail)

    collect_request_id = gw.get("collect_request_id")
    if collect_request_id is not None:
        order.collect_request_id = str(collect_request_id)
        db.add(order)
        db.commit()

    payment_url = gw.get("collect_request_url")
    return CreatePaymentOut(
        message="Payment created successfully. Redirect user to payment URL.",
        order=CreatedOrderOut(
            id=str(order.id),
            custom_order_id=order.custom_order_id,
            amount=payload.amount,
            student_info=order.student_info,
        ),
        payment_gateway_response=gw,
        payment_url=str(payment_url) if payment_url is not None else None,
        collect_request_id=order.collect_request_id,
    )
