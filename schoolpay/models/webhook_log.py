import uuid
from datetime import datetime
from typing import Any
from sqlalchemy import JSON, DateTime, String, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from schoolpay.db.base import Base
from schoolpay.core.clock import utcnow

RECEIVED = "received"
PROCESSED = "processed"
FAILED = "failed"


class WebhookLog(Base):
    """
    Audit row for one inbound gateway notification.
    Written before processing, finalized once, never revised afterwards.
    Linked to an order only through payload["order_info"]["order_id"].
    """

    __tablename__ = "webhook_logs"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    event_type: Mapped[str] = mapped_column(String(40), index=True, nullable=False)

    # raw body as received
    payload: Mapped[Any] = mapped_column(JSON, nullable=False)

    status: Mapped[str] = mapped_column(
        String(24), index=True, nullable=False, default=RECEIVED
    )  # received|processed|failed
    error_message: Mapped[str | None] = mapped_column(String(400), nullable=True)

    received_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now()
    )
    processed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), index=True, nullable=True
    )
