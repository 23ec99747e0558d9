"""Лайки событий: переключение лайка и согласованность счётчика events.likes.

Счётчик events.likes хранит count(event_likes) для события и меняется только
здесь, относительным UPDATE внутри той же транзакции, что и вставка/удаление
строки event_likes.
"""
import logging
from typing import List, Optional

from sqlalchemy import case, delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import release_transaction
from models.event import Event
from models.event_like import EVENT_LIKE_UNIQUE, EventLike
from schemas.like import CounterDrift, LikeResponse

logger = logging.getLogger("uvicorn.error")

# likes = GREATEST(likes - 1, 0), переносимо между PostgreSQL и SQLite
DECREMENTED_LIKES = case((Event.likes > 0, Event.likes - 1), else_=0)


async def has_liked(db: AsyncSession, event_id: str, user_id: str) -> bool:
    res = await db.execute(
        select(EventLike.id).where(
            EventLike.event_id == event_id,
            EventLike.user_id == user_id,
        )
    )
    return res.scalar_one_or_none() is not None


async def _lock_event(db: AsyncSession, event_id: str) -> bool:
    res = await db.execute(
        select(Event.id).where(Event.id == event_id).with_for_update()
    )
    return res.scalar_one_or_none() is not None


async def _find_like(db: AsyncSession, event_id: str, user_id: str) -> Optional[str]:
    res = await db.execute(
        select(EventLike.id).where(
            EventLike.event_id == event_id,
            EventLike.user_id == user_id,
        )
    )
    return res.scalar_one_or_none()


def _is_duplicate_like(exc: IntegrityError) -> bool:
    message = str(exc.orig)
    # PostgreSQL называет ограничение, SQLite перечисляет колонки
    return EVENT_LIKE_UNIQUE in message or "event_likes.event_id, event_likes.user_id" in message


async def toggle_like(db: AsyncSession, event_id: str, user_id: str) -> LikeResponse:
    """
    Поставить лайк, если его нет, или убрать, если он есть.

    Всё выполняется в одной транзакции сессии: строка события блокируется
    (SELECT ... FOR UPDATE), поэтому повторные переключения той же пары видят
    уже закоммиченный результат предыдущего. Любое исключение, включая отмену
    корутины, откатывает транзакцию целиком.

    Транзакция, открытая на сессии предыдущими чтениями, сначала коммитится.
    """
    await release_transaction(db)
    try:
        async with db.begin():
            if not await _lock_event(db, event_id):
                logger.warning("Toggle like for unknown event %s ignored", event_id)
                return LikeResponse(liked=False)

            like_id = await _find_like(db, event_id, user_id)
            if like_id is not None:
                await db.execute(
                    delete(EventLike)
                    .where(EventLike.id == like_id)
                    .execution_options(synchronize_session=False)
                )
                await db.execute(
                    update(Event)
                    .where(Event.id == event_id)
                    .values(likes=DECREMENTED_LIKES)
                    .execution_options(synchronize_session=False)
                )
                return LikeResponse(liked=False)

            db.add(EventLike(event_id=event_id, user_id=user_id))
            await db.flush()
            await db.execute(
                update(Event)
                .where(Event.id == event_id)
                .values(likes=Event.likes + 1)
                .execution_options(synchronize_session=False)
            )
            return LikeResponse(liked=True)
    except IntegrityError as exc:
        if not _is_duplicate_like(exc):
            raise
        # Параллельная транзакция успела вставить ту же пару
        logger.info("Duplicate like %s→%s treated as already liked", user_id, event_id)
        return LikeResponse(liked=True)


async def release_user_likes(db: AsyncSession, user_id: str) -> int:
    """
    Уменьшить счётчики всех событий, которые лайкнул пользователь, и удалить
    его лайки. Вызывается внутри транзакции удаления пользователя.
    """
    liked_events = select(EventLike.event_id).where(EventLike.user_id == user_id)
    await db.execute(
        update(Event)
        .where(Event.id.in_(liked_events))
        .values(likes=DECREMENTED_LIKES)
        .execution_options(synchronize_session=False)
    )
    res = await db.execute(
        delete(EventLike)
        .where(EventLike.user_id == user_id)
        .execution_options(synchronize_session=False)
    )
    return res.rowcount


async def find_counter_drift(db: AsyncSession) -> List[CounterDrift]:
    """События, у которых events.likes не совпадает с числом строк event_likes."""
    actual = (
        select(EventLike.event_id, func.count(EventLike.id).label("actual"))
        .group_by(EventLike.event_id)
        .subquery()
    )
    actual_count = func.coalesce(actual.c.actual, 0)
    res = await db.execute(
        select(Event.id, Event.likes, actual_count)
        .outerjoin(actual, actual.c.event_id == Event.id)
        .where(Event.likes != actual_count)
        .order_by(Event.id)
    )
    return [
        CounterDrift(event_id=event_id, likes=likes, actual=count)
        for event_id, likes, count in res.all()
    ]
