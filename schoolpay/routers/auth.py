from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import or_
from sqlalchemy.orm import Session

from schoolpay.core.config import Settings, get_settings
from schoolpay.core.security import hash_password, make_access_token, verify_password
from schoolpay.db.session import get_db
from schoolpay.models.user import User
from schoolpay.schemas.auth import LoginIn, RegisterIn, TokenOut, UserOut

router = APIRouter(prefix="/auth", tags=["auth"])


def _token_out(settings: Settings, user: User) -> TokenOut:
    access = make_access_token(settings, str(user.id), user.username, user.role)
    return TokenOut(
        access_token=access,
        user=UserOut(
            id=str(user.id), username=user.username, email=user.email, role=user.role
        ),
    )


@router.post("/register", response_model=TokenOut, status_code=201)
def register(
    payload: RegisterIn,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    username = payload.username.strip()
    email = payload.email.lower().strip()

    existing = (
        db.query(User)
        .filter(or_(User.username == username, User.email == email))
        .first()
    )
    if existing:
        raise HTTPException(status_code=409, detail="User already exists")

    user = User(
        username=username,
        email=email,
        password_hash=hash_password(payload.password),
        role="admin",
    )
    db.add(user)
    db.commit()
    db.refresh(user)

    return _token_out(settings, user)


@router.post("/login", response_model=TokenOut)
def login(
    payload: LoginIn,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    user = db.query(User).filter(User.username == payload.username.strip()).first()

    # same message for unknown user and bad password
    if not user or not verify_password(payload.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid credentials")

    return _token_out(settings, user)
