import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from pydantic import ValidationError
from sqlalchemy.orm import Session

from schoolpay.core.clock import utcnow
from schoolpay.models.order import Order
from schoolpay.models.order_status import ERROR_MESSAGE_MAX, OrderStatus
from schoolpay.models.webhook_log import FAILED, PROCESSED, RECEIVED, WebhookLog
from schoolpay.schemas.webhook import (
    OrderInfoIn,
    WebhookIn,
    WebhookLogOut,
    WebhookOrderOut,
)

logger = logging.getLogger("app.webhooks")

EVENT_TYPE = "payment_update"


@dataclass
class WebhookOutcome:
    body: dict[str, Any]
    http_status: int = 200
    log_id: uuid.UUID | None = field(default=None)


def _as_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def record_webhook(db: Session, raw: Any) -> WebhookLog:
    log = WebhookLog(event_type=EVENT_TYPE, payload=raw, status=RECEIVED)
    db.add(log)
    db.commit()
    return log


def _finalize(
    db: Session, log_id: uuid.UUID, status: str, error: str | None = None
) -> None:
    db.query(WebhookLog).filter(WebhookLog.id == log_id).update(
        {
            "status": status,
            "processed_at": utcnow(),
            "error_message": error[:400] if error else None,
        }
    )
    db.commit()


def apply_order_info(db: Session, order: Order, info: OrderInfoIn) -> OrderStatus:
    """Overwrite the order's status row with everything the webhook carries."""
    row = (
        db.query(OrderStatus)
        .filter(OrderStatus.collect_id == order.id)
        .with_for_update()
        .first()
    )
    if row is None:
        row = OrderStatus(collect_id=order.id)
        db.add(row)

    row.order_amount = info.order_amount
    row.transaction_amount = info.transaction_amount
    row.payment_mode = info.payment_mode
    row.payment_details = info.payment_details
    row.bank_reference = info.bank_reference
    row.payment_message = info.payment_message
    row.status = info.status
    row.error_message = (info.error_message or "")[:ERROR_MESSAGE_MAX]
    row.payment_time = _as_utc(info.payment_time)
    db.flush()
    return row


def status_to_dict(row: OrderStatus) -> dict[str, Any]:
    return {
        "collect_id": str(row.collect_id),
        "order_amount": row.order_amount,
        "transaction_amount": row.transaction_amount,
        "payment_mode": row.payment_mode,
        "payment_details": row.payment_details,
        "bank_reference": row.bank_reference,
        "payment_message": row.payment_message,
        "status": row.status,
        "error_message": row.error_message,
        "payment_time": row.payment_time,
    }


def _validation_summary(exc: ValidationError) -> list[dict[str, str]]:
    return [
        {"loc": ".".join(str(p) for p in err["loc"]), "msg": err["msg"]}
        for err in exc.errors()
    ]


def handle_webhook(db: Session, raw: Any) -> WebhookOutcome:
    """
    Applies one gateway notification.

    A webhook_logs row is committed before anything else and finalized as
    processed/failed on every path. Unknown orders and processing errors are
    reported in the body; the gateway always gets a well-formed answer.
    """
    log = record_webhook(db, raw)
    log_id = log.id

    try:
        event = WebhookIn.model_validate(raw)
    except ValidationError as e:
        errors = _validation_summary(e)
        logger.info("webhook rejected log_id=%s errors=%d", log_id, len(errors))
        _finalize(
            db,
            log_id,
            FAILED,
            "Invalid payload: "
            + "; ".join(f"{x['loc']}: {x['msg']}" for x in errors),
        )
        return WebhookOutcome(
            body={
                "success": False,
                "message": "Invalid webhook payload",
                "errors": errors,
            },
            http_status=400,
            log_id=log_id,
        )

    info = event.order_info
    try:
        order = db.query(Order).filter(Order.custom_order_id == info.order_id).first()
        if not order:
            logger.info("webhook for unknown order order_id=%s", info.order_id)
            _finalize(db, log_id, FAILED, "Order not found")
            return WebhookOutcome(
                body={
                    "success": False,
                    "message": "Order not found",
                    "order_id": info.order_id,
                },
                log_id=log_id,
            )

        row = apply_order_info(db, order, info)
        db.query(WebhookLog).filter(WebhookLog.id == log_id).update(
            {"status": PROCESSED, "processed_at": utcnow()}
        )
        db.commit()
    except Exception as e:
        db.rollback()
        logger.exception("webhook processing failed log_id=%s", log_id)
        _finalize(db, log_id, FAILED, str(e))
        return WebhookOutcome(
            body={"success": False, "message": "Webhook processing failed"},
            log_id=log_id,
        )

    logger.info(
        "webhook applied custom_order_id=%s status=%s",
        order.custom_order_id,
        row.status,
    )
    return WebhookOutcome(
        body={
            "success": True,
            "message": "Webhook processed successfully",
            "order": WebhookOrderOut(
                id=str(order.id),
                custom_order_id=order.custom_order_id,
                status=row.status,
            ),
            "updated_order_status": status_to_dict(row),
        },
        log_id=log_id,
    )


def list_order_webhook_logs(db: Session, order: Order) -> list[WebhookLogOut]:
    """Audit rows whose payload references this order's custom_order_id."""
    logs = (
        db.query(WebhookLog)
        .filter(
            WebhookLog.payload[("order_info", "order_id")].as_string()
            == order.custom_order_id
        )
        .order_by(WebhookLog.received_at.desc())
        .all()
    )
    return [
        WebhookLogOut(
            id=str(x.id),
            event_type=x.event_type,
            status=x.status,
            payload=x.payload,
            error_message=x.error_message,
            received_at=x.received_at,
            processed_at=x.processed_at,
        )
        for x in logs
    ]
