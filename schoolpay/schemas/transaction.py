from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class TransactionOut(BaseModel):
    """One row of the Order ⟕ OrderStatus join. Status-side fields are null
    for an order that has no status row yet."""

    model_config = ConfigDict(populate_by_name=True)

    collect_id: str
    school_id: str
    gateway: str
    order_amount: float | None
    transaction_amount: float | None
    status: str | None
    custom_order_id: str
    student_info: dict[str, Any]
    payment_mode: str | None
    payment_time: datetime | None
    payment_message: str | None
    created_at: datetime | None = Field(alias="createdAt")


class PaginationOut(BaseModel):
    current_page: int
    total_pages: int
    total_records: int
    records_per_page: int


class TransactionPageOut(BaseModel):
    success: bool = True
    data: list[TransactionOut]
    pagination: PaginationOut


class SchoolTransactionPageOut(TransactionPageOut):
    school_id: str


class TransactionStatusOut(BaseModel):
    id: str
    custom_order_id: str
    school_id: str
    trustee_id: str
    student_info: dict[str, Any]
    gateway_name: str
    collect_request_id: str | None
    created_at: datetime | None
    updated_at: datetime | None
    order_amount: float
    transaction_amount: float
    payment_mode: str
    payment_details: str
    bank_reference: str
    payment_message: str
    status: str
    error_message: str
    payment_time: datetime | None
