from typing import AsyncGenerator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine, AsyncEngine, AsyncSession, async_sessionmaker

from .config import settings


def configure_sqlite(engine: AsyncEngine) -> None:
    """
    SQLite: включаем внешние ключи и начинаем каждую транзакцию с BEGIN IMMEDIATE,
    чтобы пишущие транзакции выстраивались в очередь на уровне самой базы.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        # драйвер больше не шлёт свой BEGIN
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def build_engine(url: str) -> AsyncEngine:
    kwargs = {"echo": settings.DEBUG, "future": True}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"timeout": 30}
    else:
        kwargs["pool_pre_ping"] = True      # проверка соединения перед использованием

    engine = create_async_engine(url, **kwargs)
    if url.startswith("sqlite"):
        configure_sqlite(engine)
    return engine


engine = build_engine(settings.DATABASE_URL)

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Асинхронный генератор сессии.
    Используется как Depends(get_db) в роутерах.
    """
    async with AsyncSessionLocal() as session:
        yield session


async def release_transaction(session: AsyncSession) -> None:
    """
    Закоммитить транзакцию, которую сессия открыла сама (autobegin) на чтении,
    чтобы следующий session.begin() начал новую.
    """
    if session.in_transaction():
        await session.commit()
