import json

from fastapi import APIRouter, Depends, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from schoolpay.core.deps import get_current_user
from schoolpay.db.session import get_db
from schoolpay.models.user import User
from schoolpay.services.lookup import find_order
from schoolpay.services.webhooks import handle_webhook, list_order_webhook_logs

router = APIRouter(prefix="/orders", tags=["webhooks"])


@router.post("/webhook")
async def gateway_webhook(request: Request, db: Session = Depends(get_db)):
    """
    Gateway notification endpoint, no auth.

    Answers 200 for every payload it could read, including unknown orders and
    processing errors (reported as success=false). A 400 means the payload
    itself is malformed; redelivering the same body will not help.
    """
    # keep the raw body: unparseable payloads are still logged
    body = await request.body()
    try:
        raw = json.loads(body)
    except ValueError:
        raw = body.decode("utf-8", errors="replace")

    outcome = await run_in_threadpool(handle_webhook, db, raw)
    return JSONResponse(
        status_code=outcome.http_status, content=jsonable_encoder(outcome.body)
    )


@router.get("/{order_ref}/webhook-logs")
def order_webhook_logs(
    order_ref: str,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    order = find_order(db, order_ref)
    if order is None:
        return {"success": False, "message": "Order not found", "order_id": order_ref}
    return {
        "success": True,
        "custom_order_id": order.custom_order_id,
        "logs": list_order_webhook_logs(db, order),
    }
