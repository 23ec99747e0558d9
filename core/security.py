# core/security.py
from functools import lru_cache
from typing import Callable

import requests
from fastapi import HTTPException, Depends
from fastapi.security import OAuth2PasswordBearer
from jose import jwt, JWTError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette import status
from starlette.concurrency import run_in_threadpool

from core.config import settings
from core.database import get_db
from models.user import User
from services.users import upsert_user

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/token")

JWKS_TIMEOUT_SECONDS = 5


@lru_cache(maxsize=1)
def _load_jwks(domain: str) -> dict:
    """Публичные ключи тенанта Auth0 (кэшируются на время жизни процесса)."""
    response = requests.get(f"https://{domain}/.well-known/jwks.json", timeout=JWKS_TIMEOUT_SECONDS)
    response.raise_for_status()
    return response.json()


async def _signing_key(token: str):
    if settings.AUTH0_ALGORITHM.startswith("HS"):
        if not settings.AUTH0_CLIENT_SECRET:
            raise JWTError("AUTH0_CLIENT_SECRET is not configured")
        return settings.AUTH0_CLIENT_SECRET

    if not settings.AUTH0_DOMAIN:
        raise JWTError("AUTH0_DOMAIN is not configured")
    kid = jwt.get_unverified_header(token).get("kid")
    jwks = await run_in_threadpool(_load_jwks, settings.AUTH0_DOMAIN)
    for key in jwks.get("keys", []):
        if key.get("kid") == kid:
            return key
    raise JWTError(f"Unknown signing key: {kid}")


async def decode_token(token: str) -> dict:
    """
    Проверяет подпись и claims access-токена Auth0 и возвращает payload.
    Бросает HTTPException(401), если токен невалиден.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    options = {"verify_aud": bool(settings.AUTH0_AUDIENCE)}
    if not settings.auth0_issuer:
        options["verify_iss"] = False

    try:
        key = await _signing_key(token)
        payload = jwt.decode(
            token,
            key,
            algorithms=[settings.AUTH0_ALGORITHM],
            audience=settings.AUTH0_AUDIENCE,
            issuer=settings.auth0_issuer,
            options=options,
        )
    except (JWTError, requests.RequestException):
        raise credentials_exception

    if not payload.get("sub"):
        raise credentials_exception
    return payload


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    payload = await decode_token(token)
    return await upsert_user(db, payload)


def require_roles(*roles: str, detail: str = "Insufficient permissions") -> Callable:
    """Зависимость: пропускает только пользователей с одной из ролей."""

    async def checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=detail,
            )
        return current_user

    return checker
