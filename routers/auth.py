# routers/auth.py
from fastapi import APIRouter, Depends

from core.security import get_current_user
from models.user import User
from schemas.user import UserRead

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.get(
    "/user",
    response_model=UserRead,
    summary="Текущий пользователь (создаётся при первом входе через Auth0)",
)
async def read_current_user(current_user: User = Depends(get_current_user)) -> UserRead:
    return UserRead.model_validate(current_user)
