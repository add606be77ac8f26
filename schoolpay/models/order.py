import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Any, Optional
from sqlalchemy import JSON, DateTime, String, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from schoolpay.db.base import Base
from schoolpay.core.clock import utcnow

if TYPE_CHECKING:
    from schoolpay.models.order_status import OrderStatus


class Order(Base):
    """
    One payment attempt.
    Written once at create-payment time; settlement state lives in OrderStatus.
    """

    __tablename__ = "orders"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    # correlation id handed to the gateway, echoed back in webhooks
    custom_order_id: Mapped[str] = mapped_column(
        String(64), unique=True, index=True, nullable=False
    )

    school_id: Mapped[str] = mapped_column(String(64), index=True, nullable=False)
    trustee_id: Mapped[str] = mapped_column(String(64), nullable=False)

    # {name, id, email}; stored as given
    student_info: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)

    gateway_name: Mapped[str] = mapped_column(String(40), nullable=False)
    collect_request_id: Mapped[str | None] = mapped_column(String(120), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
    )

    order_status: Mapped[Optional["OrderStatus"]] = relationship(
        "OrderStatus", back_populates="order", uselist=False
    )
