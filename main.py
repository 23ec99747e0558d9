import logging
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from core.config import settings
from core.database import engine, AsyncSessionLocal
from models.base import Base
from models.user import User  # noqa: F401  регистрируем таблицы в Base.metadata
from models.event import Event  # noqa: F401
from models.event_like import EventLike  # noqa: F401
from services.users import ensure_default_admin

from routers.auth import router as auth_router
from routers.events import router as events_router
from routers.admin import router as admin_router
from routers.health import router as health_router

app = FastAPI(
    title="Kiarutara Backend",
    version="0.1.0",
    description="Backend сайта группы Kiarutara MWANZOBOYS: события, лайки, пользователи"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

logger = logging.getLogger("uvicorn.error")


@app.middleware("http")
async def log_request_time(request: Request, call_next):
    start_time = time.perf_counter()
    response = await call_next(request)
    process_time = (time.perf_counter() - start_time) * 1000
    logger.info(
        f"{request.method} {request.url.path} completed in {process_time:.2f} ms"
    )
    return response

app.include_router(auth_router)
app.include_router(events_router)
app.include_router(admin_router)
app.include_router(health_router)


@app.on_event("startup")
async def on_startup():

    # Сначала создаём все таблицы
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as session:
        await ensure_default_admin(session)


@app.get("/")
async def root():
    return {"message": "Kiarutara Backend"}


@app.on_event("shutdown")
async def shutdown():
    # Закрываем все соединения пула
    await engine.dispose()
