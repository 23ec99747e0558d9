"""Пользователи: upsert при входе через Auth0, роли, удаление."""
import logging
from typing import Optional

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import settings
from core.database import release_transaction
from models.user import ROLE_ADMIN, ROLE_USER, ROLES, User
from services.likes import release_user_likes

logger = logging.getLogger("uvicorn.error")


def _is_default_admin(email: Optional[str]) -> bool:
    return bool(email) and email.lower() == settings.DEFAULT_ADMIN_EMAIL.lower()


async def upsert_user(db: AsyncSession, claims: dict) -> User:
    """Создать или обновить пользователя по claims токена и закоммитить."""
    user_id = claims["sub"]
    email = claims.get("email")

    user = await db.get(User, user_id)
    if user is None:
        user = User(
            id=user_id,
            role=ROLE_ADMIN if _is_default_admin(email) else ROLE_USER,
        )
        db.add(user)
        logger.info("New user %s registered", user_id)

    if email:
        user.email = email
    for field, claim in (
        ("first_name", "given_name"),
        ("last_name", "family_name"),
        ("profile_image_url", "picture"),
    ):
        value = claims.get(claim)
        if value:
            setattr(user, field, value)

    await db.commit()
    return user


async def ensure_default_admin(db: AsyncSession) -> None:
    """Выдать роль admin пользователю с DEFAULT_ADMIN_EMAIL, если он уже есть."""
    res = await db.execute(
        select(User).where(func.lower(User.email) == settings.DEFAULT_ADMIN_EMAIL.lower())
    )
    user = res.scalar_one_or_none()
    if user and user.role != ROLE_ADMIN:
        user.role = ROLE_ADMIN
        logger.info("Default admin role granted to %s", user.id)
    await db.commit()


async def update_user_role(db: AsyncSession, user_id: str, role: str) -> User:
    if role not in ROLES:
        raise ValueError(f"Invalid role: {role}")
    user = await db.get(User, user_id)
    if user is None:
        raise LookupError(user_id)
    user.role = role
    await db.commit()
    return user


async def delete_user(db: AsyncSession, user_id: str) -> bool:
    """
    Удалить пользователя вместе с его лайками.

    Счётчики событий уменьшаются в той же транзакции, иначе каскадное удаление
    строк event_likes оставило бы events.likes завышенными.
    """
    await release_transaction(db)
    async with db.begin():
        if await db.get(User, user_id) is None:
            return False
        released = await release_user_likes(db, user_id)
        await db.execute(
            delete(User)
            .where(User.id == user_id)
            .execution_options(synchronize_session=False)
        )
    logger.info("User %s deleted, %d likes released", user_id, released)
    return True
