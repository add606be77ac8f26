import uuid

from fastapi import Depends, HTTPException, Request, status
from jose import JWTError
from sqlalchemy.orm import Session

from schoolpay.core.config import Settings, get_settings
from schoolpay.core.security import decode_token
from schoolpay.db.session import get_db
from schoolpay.models.user import User
from schoolpay.services.gateway import GatewayClient


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    request: Request,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> User:
    auth = request.headers.get("authorization") or ""
    scheme, _, token = auth.partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise _unauthorized("Not authenticated")

    try:
        payload = decode_token(settings, token)
    except JWTError:
        raise _unauthorized("Invalid access token")

    if payload.get("type") != "access":
        raise _unauthorized("Invalid access token")

    user_id = payload.get("sub")
    if not user_id:
        raise _unauthorized("Invalid access token")

    try:
        user_uuid = uuid.UUID(str(user_id))
    except ValueError:
        raise _unauthorized("Invalid access token")

    user = db.query(User).filter(User.id == user_uuid).first()
    if not user:
        raise _unauthorized("User not found")

    return user


def get_gateway_client(settings: Settings = Depends(get_settings)) -> GatewayClient:
    return GatewayClient(settings)
