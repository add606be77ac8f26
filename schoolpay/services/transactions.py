import logging
import math
from dataclasses import dataclass
from datetime import date, datetime, time, timezone

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from schoolpay.core.errors import ValidationFailure
from schoolpay.models.order import Order
from schoolpay.models.order_status import PENDING, OrderStatus
from schoolpay.schemas.transaction import (
    PaginationOut,
    SchoolTransactionPageOut,
    TransactionOut,
    TransactionPageOut,
    TransactionStatusOut,
)
from schoolpay.services.lookup import Found

logger = logging.getLogger("app.transactions")

MAX_LIMIT = 100

# projected field name -> sortable column
SORT_FIELDS = {
    "collect_id": Order.id,
    "school_id": Order.school_id,
    "gateway": Order.gateway_name,
    "custom_order_id": Order.custom_order_id,
    "student_info.name": Order.student_info["name"].as_string(),
    "student_info.id": Order.student_info["id"].as_string(),
    "student_info.email": Order.student_info["email"].as_string(),
    "createdAt": Order.created_at,
    "created_at": Order.created_at,
    "order_amount": OrderStatus.order_amount,
    "transaction_amount": OrderStatus.transaction_amount,
    "status": OrderStatus.status,
    "payment_mode": OrderStatus.payment_mode,
    "payment_time": OrderStatus.payment_time,
    "payment_message": OrderStatus.payment_message,
}


@dataclass
class TransactionQuery:
    page: int = 1
    limit: int = 10
    status: str | None = None
    payment_mode: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    sort_by: str = "createdAt"
    sort_order: str = "desc"
    school_id: str | None = None

    def validate(self) -> None:
        if self.page < 1:
            raise ValidationFailure("Page number must be greater than 0")
        if self.limit < 1:
            raise ValidationFailure("Limit must be greater than 0")
        if self.limit > MAX_LIMIT:
            raise ValidationFailure(
                f"Limit cannot exceed {MAX_LIMIT} records per page"
            )
        if self.sort_by not in SORT_FIELDS:
            raise ValidationFailure(f"Cannot sort by '{self.sort_by}'")
        if self.sort_order not in ("asc", "desc"):
            raise ValidationFailure("sort_order must be 'asc' or 'desc'")

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit


def day_bounds(
    start_date: date | None, end_date: date | None
) -> tuple[datetime | None, datetime | None]:
    """Whole UTC days, inclusive: start 00:00:00.000, end 23:59:59.999."""
    start = (
        datetime.combine(start_date, time.min, tzinfo=timezone.utc)
        if start_date
        else None
    )
    end = (
        datetime.combine(end_date, time(23, 59, 59, 999000), tzinfo=timezone.utc)
        if end_date
        else None
    )
    return start, end


def _conditions(q: TransactionQuery) -> list:
    conds = []
    if q.school_id:
        conds.append(Order.school_id == q.school_id)
    if q.status:
        conds.append(OrderStatus.status == q.status)
    if q.payment_mode:
        conds.append(OrderStatus.payment_mode == q.payment_mode)

    start, end = day_bounds(q.start_date, q.end_date)
    if start is not None:
        conds.append(OrderStatus.payment_time >= start)
    if end is not None:
        conds.append(OrderStatus.payment_time <= end)
    return conds


def _project(order: Order, st: OrderStatus | None) -> TransactionOut:
    return TransactionOut(
        collect_id=str(order.id),
        school_id=order.school_id,
        gateway=order.gateway_name,
        order_amount=st.order_amount if st else None,
        transaction_amount=st.transaction_amount if st else None,
        status=st.status if st else None,
        custom_order_id=order.custom_order_id,
        student_info=order.student_info,
        payment_mode=st.payment_mode if st else None,
        payment_time=st.payment_time if st else None,
        payment_message=st.payment_message if st else None,
        created_at=order.created_at,
    )


def list_transactions(db: Session, q: TransactionQuery) -> TransactionPageOut:
    """
    Order LEFT JOIN OrderStatus, filtered, sorted and sliced in SQL.

    The total is counted over the same join and conditions, so pagination
    metadata always matches the rows a full walk over the pages returns.
    """
    q.validate()

    conds = _conditions(q)
    join_on = OrderStatus.collect_id == Order.id

    total = int(
        db.scalar(
            select(func.count(Order.id))
            .select_from(Order)
            .outerjoin(OrderStatus, join_on)
            .where(*conds)
        )
        or 0
    )

    col = SORT_FIELDS[q.sort_by]
    if q.sort_order == "asc":
        ordering = (col.asc(), Order.id.asc())
    else:
        ordering = (col.desc(), Order.id.desc())

    rows = db.execute(
        select(Order, OrderStatus)
        .outerjoin(OrderStatus, join_on)
        .where(*conds)
        .order_by(*ordering)
        .offset(q.skip)
        .limit(q.limit)
    ).all()

    logger.info(
        "transactions page=%s limit=%s total=%s school_id=%s",
        q.page,
        q.limit,
        total,
        q.school_id or "*",
    )

    data = [_project(order, st) for order, st in rows]
    pagination = PaginationOut(
        current_page=q.page,
        total_pages=math.ceil(total / q.limit),
        total_records=total,
        records_per_page=q.limit,
    )
    if q.school_id:
        return SchoolTransactionPageOut(
            school_id=q.school_id, data=data, pagination=pagination
        )
    return TransactionPageOut(data=data, pagination=pagination)


def transaction_status(found: Found) -> TransactionStatusOut:
    order, st = found.order, found.order_status
    return TransactionStatusOut(
        id=str(order.id),
        custom_order_id=order.custom_order_id,
        school_id=order.school_id,
        trustee_id=order.trustee_id,
        student_info=order.student_info,
        gateway_name=order.gateway_name,
        collect_request_id=order.collect_request_id,
        created_at=order.created_at,
        updated_at=order.updated_at,
        order_amount=st.order_amount if st else 0,
        transaction_amount=st.transaction_amount if st else 0,
        payment_mode=st.payment_mode if st else "pending",
        payment_details=st.payment_details if st else "",
        bank_reference=st.bank_reference if st else "",
        payment_message=st.payment_message if st else "",
        status=st.status if st else PENDING,
        error_message=st.error_message if st else "",
        payment_time=st.payment_time if st else order.created_at,
    )
