import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["SCHOOL_ID"] = "65b0e6293e9f76a9694d84b4"
os.environ["DEFAULT_TRUSTEE_ID"] = "65b0e552dd31950a9b41c5ba"
os.environ["PAYMENT_API_KEY"] = "test-api-key"
os.environ["PAYMENT_PG_KEY"] = "edvtest01"

import uuid
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from schoolpay.main import app
from schoolpay.core.config import get_settings
from schoolpay.core.deps import get_gateway_client
from schoolpay.core.security import make_access_token
from schoolpay.db.base import Base
from schoolpay.db.session import get_db
from schoolpay.models.order import Order
from schoolpay.models.order_status import OrderStatus
from schoolpay.models.user import User
from schoolpay.services.gateway import GatewayError

SCHOOL_ID = os.environ["SCHOOL_ID"]


class FakeGateway:
    def __init__(self):
        self.calls: list[tuple[float, str | None]] = []
        self.error: GatewayError | None = None

    def create_collect_request(self, amount, callback_url=None):
        self.calls.append((amount, callback_url))
        if self.error is not None:
            raise self.error
        n = len(self.calls)
        return {
            "collect_request_id": f"CR{n:04d}",
            "collect_request_url": f"https://pay.example.test/collect/CR{n:04d}",
            "sign": "signed",
        }


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=eng)
    yield eng
    Base.metadata.drop_all(bind=eng)
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def client(session_factory, gateway):
    def _get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_gateway_client] = lambda: gateway
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def user(session_factory):
    with session_factory() as s:
        u = User(
            username="bursar",
            email="bursar@greenfield.edu",
            password_hash="not-used",
            role="admin",
        )
        s.add(u)
        s.commit()
        return u


@pytest.fixture
def auth_headers(user):
    token = make_access_token(get_settings(), str(user.id), user.username, user.role)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def make_order(session_factory):
    """Inserts an order (and by default its status row) and returns the Order."""

    def _make(
        *,
        custom_order_id: str | None = None,
        school_id: str = SCHOOL_ID,
        created_at: datetime | None = None,
        with_status: bool = True,
        status: str = "pending",
        payment_mode: str = "pending",
        amount: float = 100.0,
        payment_time: datetime | None = None,
        student_name: str = "Student",
    ) -> Order:
        with session_factory() as s:
            order = Order(
                custom_order_id=custom_order_id or f"ORD_TEST_{uuid.uuid4().hex[:10]}",
                school_id=school_id,
                trustee_id="trustee-1",
                student_info={
                    "name": student_name,
                    "id": "S1",
                    "email": "s1@greenfield.edu",
                },
                gateway_name="Edviron",
            )
            if created_at is not None:
                order.created_at = created_at
            s.add(order)
            s.flush()
            if with_status:
                s.add(
                    OrderStatus(
                        collect_id=order.id,
                        order_amount=amount,
                        transaction_amount=amount,
                        payment_mode=payment_mode,
                        payment_details="details",
                        bank_reference="",
                        payment_message="message",
                        status=status,
                        error_message="",
                        payment_time=payment_time
                        or datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc),
                    )
                )
            s.commit()
            return order

    return _make


def webhook_payload(order_id: str, **overrides) -> dict:
    info = {
        "order_id": order_id,
        "order_amount": 500,
        "transaction_amount": 500,
        "gateway": "PhonePe",
        "bank_reference": "YESBNK222",
        "status": "success",
        "payment_mode": "upi",
        "payment_details": "success@ybl",
        "payment_message": "payment success",
        "payment_time": "2025-04-23T08:14:21.945+00:00",
        "error_message": "NA",
    }
    info.update(overrides)
    return {"status": 200, "order_info": info}
