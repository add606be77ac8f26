from fastapi import APIRouter, Depends
from schoolpay.core.deps import get_current_user
from schoolpay.models.user import User
from schoolpay.schemas.auth import UserOut

router = APIRouter(tags=["me"])


@router.get("/me", response_model=UserOut)
def me(user: User = Depends(get_current_user)):
    return UserOut(id=str(user.id), username=user.username, email=user.email, role=user.role)
