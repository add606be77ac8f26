from datetime import datetime
from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class OrderInfoIn(BaseModel):
    """
    `order_info` block of a gateway notification.

    The gateway has shipped `payemnt_details`, `Payment_message` and
    `Error_message` on the wire; those spellings are accepted and mapped onto
    the normal field names.
    """

    model_config = ConfigDict(extra="forbid")

    order_id: str = Field(min_length=1, max_length=64)
    order_amount: float = Field(ge=0)
    transaction_amount: float = Field(ge=0)
    gateway: str = Field(min_length=1, max_length=40)
    bank_reference: str = Field(max_length=120)
    status: Literal["success", "failed", "pending"]
    payment_mode: str = Field(min_length=1, max_length=40)
    payment_details: str = Field(
        max_length=255,
        validation_alias=AliasChoices("payment_details", "payemnt_details"),
    )
    payment_message: str = Field(
        max_length=255,
        validation_alias=AliasChoices("payment_message", "Payment_message"),
    )
    payment_time: datetime
    error_message: str | None = Field(
        default=None,
        validation_alias=AliasChoices("error_message", "Error_message"),
    )


class WebhookIn(BaseModel):
    model_config = ConfigDict(extra="forbid")

    status: int
    order_info: OrderInfoIn


class WebhookOrderOut(BaseModel):
    id: str
    custom_order_id: str
    status: str


class WebhookLogOut(BaseModel):
    id: str
    event_type: str
    status: str
    payload: Any
    error_message: str | None
    received_at: datetime | None
    processed_at: datetime | None
