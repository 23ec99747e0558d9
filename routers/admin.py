import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import get_db
from core.security import require_roles
from models.user import ROLE_ADMIN, User
from schemas.like import CounterDrift
from schemas.user import MessageResponse, RoleUpdate, UserRead
from services.likes import find_counter_drift
from services.users import delete_user, update_user_role

router = APIRouter(prefix="/api/admin", tags=["Admin"])
logger = logging.getLogger("uvicorn.error")

require_admin = require_roles(ROLE_ADMIN, detail="Admin access required")


@router.get(
    "/users",
    response_model=List[UserRead],
    summary="Все пользователи",
)
async def list_users(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_admin),
) -> List[UserRead]:
    res = await db.execute(select(User).order_by(desc(User.created_at)))
    return [UserRead.model_validate(u) for u in res.scalars().all()]


@router.put(
    "/users/{user_id}/role",
    response_model=UserRead,
    summary="Сменить роль пользователя",
)
async def change_role(
    user_id: str,
    payload: RoleUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_admin),
) -> UserRead:
    try:
        user = await update_user_role(db, user_id, payload.role)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid role")
    except LookupError:
        raise HTTPException(status_code=404, detail="User not found")

    logger.info("Role of %s set to %s by %s", user_id, payload.role, current_user.id)
    return UserRead.model_validate(user)


@router.delete(
    "/users/{user_id}",
    response_model=MessageResponse,
    summary="Удалить пользователя и его лайки",
)
async def remove_user(
    user_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_admin),
) -> MessageResponse:
    if user_id == current_user.id:
        raise HTTPException(status_code=400, detail="Cannot delete your own account")
    if not await delete_user(db, user_id):
        raise HTTPException(status_code=404, detail="User not found")
    return MessageResponse(message="User deleted successfully")


@router.get(
    "/likes/drift",
    response_model=List[CounterDrift],
    summary="События, у которых счётчик лайков расходится с event_likes",
)
async def likes_drift(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_admin),
) -> List[CounterDrift]:
    drift = await find_counter_drift(db)
    if drift:
        logger.warning("Likes counter drift detected for %d events", len(drift))
    return drift
