from typing import Any

from pydantic import BaseModel, ConfigDict, EmailStr, Field, HttpUrl


class StudentInfo(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1, max_length=120)
    id: str = Field(min_length=1, max_length=64)
    email: EmailStr


class CreatePaymentIn(BaseModel):
    model_config = ConfigDict(extra="forbid")

    amount: float = Field(gt=0)
    student_info: StudentInfo
    callback_url: HttpUrl | None = None
    trustee_id: str | None = Field(default=None, min_length=1, max_length=64)


class CreatedOrderOut(BaseModel):
    id: str
    custom_order_id: str
    amount: float
    student_info: dict[str, Any]


class CreatePaymentOut(BaseModel):
    success: bool = True
    message: str
    order: CreatedOrderOut
    payment_gateway_response: dict[str, Any]
    payment_url: str | None
    collect_request_id: str | None
