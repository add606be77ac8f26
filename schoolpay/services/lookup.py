import re
import uuid
from dataclasses import dataclass

from sqlalchemy.orm import Session

from schoolpay.models.order import Order
from schoolpay.models.order_status import OrderStatus

_UUID_RE = re.compile(
    r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$"
)


@dataclass(frozen=True)
class Found:
    order: Order
    order_status: OrderStatus | None


@dataclass(frozen=True)
class NotFound:
    identifier: str


def find_order(db: Session, identifier: str) -> Order | None:
    """Primary id first when the input looks like one, then custom_order_id."""
    order = None
    if _UUID_RE.match(identifier):
        order = db.get(Order, uuid.UUID(identifier))
    if order is None:
        order = db.query(Order).filter(Order.custom_order_id == identifier).first()
    return order


def lookup_order(db: Session, identifier: str) -> Found | NotFound:
    order = find_order(db, identifier)
    if order is None:
        return NotFound(identifier)
    status = (
        db.query(OrderStatus).filter(OrderStatus.collect_id == order.id).first()
    )
    return Found(order, status)
