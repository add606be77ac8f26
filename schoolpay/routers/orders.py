from datetime import date

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from schoolpay.core.config import Settings, get_settings
from schoolpay.core.deps import get_current_user, get_gateway_client
from schoolpay.db.session import get_db
from schoolpay.models.user import User
from schoolpay.schemas.order import CreatePaymentIn, CreatePaymentOut
from schoolpay.schemas.transaction import SchoolTransactionPageOut, TransactionPageOut
from schoolpay.services.gateway import GatewayClient
from schoolpay.services.lookup import NotFound, lookup_order
from schoolpay.services.payments import create_payment
from schoolpay.services.transactions import (
    TransactionQuery,
    list_transactions,
    transaction_status,
)

router = APIRouter(prefix="/orders", tags=["orders"])


def transaction_filters(
    page: int = 1,
    limit: int = 10,
    status: str | None = None,
    payment_mode: str | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
    sort_by: str = "createdAt",
    sort_order: str = "desc",
) -> TransactionQuery:
    # range checks happen in TransactionQuery.validate
    return TransactionQuery(
        page=page,
        limit=limit,
        status=status,
        payment_mode=payment_mode,
        start_date=start_date,
        end_date=end_date,
        sort_by=sort_by,
        sort_order=sort_order,
    )


@router.post("/create-payment", response_model=CreatePaymentOut, status_code=201)
def create_payment_route(
    payload: CreatePaymentIn,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    gateway: GatewayClient = Depends(get_gateway_client),
    user: User = Depends(get_current_user),
):
    return create_payment(db, settings, gateway, payload)


@router.get("/transactions", response_model=TransactionPageOut)
def all_transactions(
    q: TransactionQuery = Depends(transaction_filters),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return list_transactions(db, q)


@router.get("/transactions/school/{school_id}", response_model=SchoolTransactionPageOut)
def school_transactions(
    school_id: str,
    q: TransactionQuery = Depends(transaction_filters),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    q.school_id = school_id
    return list_transactions(db, q)


@router.get("/transaction-status/{transaction_id}")
def get_transaction_status(
    transaction_id: str,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    result = lookup_order(db, transaction_id)
    if isinstance(result, NotFound):
        return {
            "success": False,
            "message": "Transaction not found",
            "transaction_id": result.identifier,
        }
    return {"success": True, "transaction": transaction_status(result)}
