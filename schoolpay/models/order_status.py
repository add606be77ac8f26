import uuid
from datetime import datetime
from typing import TYPE_CHECKING
from sqlalchemy import DateTime, ForeignKey, Numeric, String, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from schoolpay.db.base import Base
from schoolpay.core.clock import utcnow

if TYPE_CHECKING:
    from schoolpay.models.order import Order

PENDING = "pending"
# gateway never accepted the collect request
CREATION_FAILED = "creation_failed"

ERROR_MESSAGE_MAX = 400


class OrderStatus(Base):
    """
    Current settlement state of an Order.
    Exactly one row per order; each accepted webhook overwrites every field.
    History is kept in webhook_logs, not here.
    """

    __tablename__ = "order_statuses"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    collect_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("orders.id", ondelete="RESTRICT"),
        unique=True,
        index=True,
        nullable=False,
    )

    order_amount: Mapped[float] = mapped_column(
        Numeric(12, 2, asdecimal=False), nullable=False
    )
    transaction_amount: Mapped[float] = mapped_column(
        Numeric(12, 2, asdecimal=False), nullable=False
    )

    payment_mode: Mapped[str] = mapped_column(String(40), nullable=False)
    payment_details: Mapped[str] = mapped_column(String(255), nullable=False)
    bank_reference: Mapped[str] = mapped_column(
        String(120), nullable=False, default=""
    )
    payment_message: Mapped[str] = mapped_column(String(255), nullable=False)

    # pending | success | failed | creation_failed
    status: Mapped[str] = mapped_column(
        String(24), index=True, nullable=False, default=PENDING
    )
    error_message: Mapped[str] = mapped_column(
        String(ERROR_MESSAGE_MAX), nullable=False, default=""
    )

    payment_time: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
    )

    order: Mapped["Order"] = relationship("Order", back_populates="order_status")
