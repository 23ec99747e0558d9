from typing import List
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import delete, desc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import get_db
from core.security import get_current_user, require_roles
from models.event import Event
from models.user import ROLE_ADMIN, ROLE_STAFF, User
from schemas.event import EventCreate, EventRead
from schemas.like import LikeResponse
from schemas.user import MessageResponse
from services.likes import has_liked, toggle_like

router = APIRouter(prefix="/api/events", tags=["events"])
logger = logging.getLogger("uvicorn.error")

require_staff = require_roles(ROLE_ADMIN, ROLE_STAFF)


async def _event_exists(db: AsyncSession, event_id: str) -> bool:
    res = await db.execute(select(Event.id).where(Event.id == event_id))
    return res.scalar_one_or_none() is not None


@router.get(
    "",
    response_model=List[EventRead],
    summary="Список событий, новые первыми",
)
async def list_events(db: AsyncSession = Depends(get_db)) -> List[EventRead]:
    res = await db.execute(select(Event).order_by(desc(Event.created_at)))
    return [EventRead.model_validate(e) for e in res.scalars().all()]


@router.post(
    "",
    response_model=EventRead,
    status_code=status.HTTP_201_CREATED,
    summary="Создать событие (staff/admin)",
)
async def create_event(
    payload: EventCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_staff),
) -> EventRead:
    event = Event(**payload.model_dump(), created_by=current_user.id)
    db.add(event)
    await db.commit()
    await db.refresh(event)
    logger.info("Event %s created by %s", event.id, current_user.id)
    return EventRead.model_validate(event)


@router.delete(
    "/{event_id}",
    response_model=MessageResponse,
    summary="Удалить событие вместе с его лайками (staff/admin)",
)
async def delete_event(
    event_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_staff),
) -> MessageResponse:
    res = await db.execute(
        delete(Event)
        .where(Event.id == event_id)
        .execution_options(synchronize_session=False)
    )
    if res.rowcount == 0:
        await db.rollback()
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Event not found")
    await db.commit()
    logger.info("Event %s deleted by %s", event_id, current_user.id)
    return MessageResponse(message="Event deleted successfully")


@router.post(
    "/{event_id}/like",
    response_model=LikeResponse,
    summary="Поставить или убрать лайк события",
)
async def toggle_event_like(
    event_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> LikeResponse:
    if not await _event_exists(db, event_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Event not found")
    try:
        return await toggle_like(db, event_id, current_user.id)
    except SQLAlchemyError as exc:
        logger.exception("Error toggling like for event %s: %s", event_id, exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to toggle like",
        ) from exc


@router.get(
    "/{event_id}/like",
    response_model=LikeResponse,
    summary="Лайкнул ли текущий пользователь событие",
)
async def get_event_like(
    event_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> LikeResponse:
    return LikeResponse(liked=await has_liked(db, event_id, current_user.id))
