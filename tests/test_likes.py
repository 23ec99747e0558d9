import asyncio

import pytest
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, OperationalError

import services.likes as likes_service
from models.event import Event
from services.likes import find_counter_drift, has_liked, toggle_like

from conftest import create_event, create_user, like_rows, likes_of


async def _toggle(factory, event_id, user_id):
    async with factory() as session:
        return await toggle_like(session, event_id, user_id)


async def _has_liked(factory, event_id, user_id):
    async with factory() as session:
        return await has_liked(session, event_id, user_id)


async def test_like_then_unlike_restores_counter(session_factory):
    event_id = await create_event(session_factory)
    user_id = await create_user(session_factory, "auth0|u1")

    first = await _toggle(session_factory, event_id, user_id)
    assert first.liked is True
    assert await likes_of(session_factory, event_id) == 1
    assert await like_rows(session_factory, event_id) == 1

    second = await _toggle(session_factory, event_id, user_id)
    assert second.liked is False
    assert await likes_of(session_factory, event_id) == 0
    assert await like_rows(session_factory, event_id) == 0


async def test_two_fans_scenario(session_factory):
    e1 = await create_event(session_factory)
    u1 = await create_user(session_factory, "auth0|u1")
    u2 = await create_user(session_factory, "auth0|u2")

    assert (await _toggle(session_factory, e1, u1)).liked is True
    assert await likes_of(session_factory, e1) == 1
    assert (await _toggle(session_factory, e1, u2)).liked is True
    assert await likes_of(session_factory, e1) == 2
    assert (await _toggle(session_factory, e1, u1)).liked is False
    assert await likes_of(session_factory, e1) == 1

    assert await _has_liked(session_factory, e1, u2) is True
    assert await _has_liked(session_factory, e1, u1) is False

    async with session_factory() as session:
        assert await find_counter_drift(session) == []


async def test_has_liked_unknown_event_is_false(session_factory):
    user_id = await create_user(session_factory, "auth0|u1")
    assert await _has_liked(session_factory, "evt_missing", user_id) is False


async def test_toggle_unknown_event_writes_nothing(session_factory):
    user_id = await create_user(session_factory, "auth0|u1")

    result = await _toggle(session_factory, "evt_missing", user_id)

    assert result.liked is False
    assert await like_rows(session_factory, "evt_missing") == 0


async def test_unlike_never_drives_counter_below_zero(session_factory):
    event_id = await create_event(session_factory)
    user_id = await create_user(session_factory, "auth0|u1")
    await _toggle(session_factory, event_id, user_id)

    # имитируем рассинхрон: счётчик сброшен, строка лайка осталась
    async with session_factory() as session:
        await session.execute(
            update(Event)
            .where(Event.id == event_id)
            .values(likes=0)
        )
        await session.commit()

    for _ in range(3):
        await _toggle(session_factory, event_id, user_id)
        assert await likes_of(session_factory, event_id) >= 0

    assert await likes_of(session_factory, event_id) == 0


async def test_concurrent_toggles_same_pair_keep_parity(session_factory):
    event_id = await create_event(session_factory)
    user_id = await create_user(session_factory, "auth0|u1")

    for calls in (5, 4):
        before = await like_rows(session_factory, event_id, user_id)
        await asyncio.gather(*[_toggle(session_factory, event_id, user_id) for _ in range(calls)])

        rows = await like_rows(session_factory, event_id, user_id)
        assert rows <= 1
        expected = before if calls % 2 == 0 else 1 - before
        assert rows == expected
        assert await likes_of(session_factory, event_id) == rows


async def test_concurrent_distinct_users_lose_no_updates(session_factory):
    event_id = await create_event(session_factory)
    users = [await create_user(session_factory, f"auth0|fan{i}") for i in range(8)]

    results = await asyncio.gather(*[_toggle(session_factory, event_id, u) for u in users])

    assert all(r.liked for r in results)
    assert await likes_of(session_factory, event_id) == len(users)
    assert await like_rows(session_factory, event_id) == len(users)


async def test_duplicate_insert_is_reported_as_liked(session_factory, monkeypatch):
    event_id = await create_event(session_factory)
    user_id = await create_user(session_factory, "auth0|u1")
    await _toggle(session_factory, event_id, user_id)

    async def like_not_seen(db, event_id, user_id):
        return None

    # существующая строка «не видна», вставка упирается в уникальный индекс
    monkeypatch.setattr(likes_service, "_find_like", like_not_seen)

    result = await _toggle(session_factory, event_id, user_id)

    assert result.liked is True
    assert await like_rows(session_factory, event_id, user_id) == 1
    assert await likes_of(session_factory, event_id) == 1


async def test_foreign_key_violation_propagates(session_factory):
    event_id = await create_event(session_factory)

    with pytest.raises(IntegrityError):
        await _toggle(session_factory, event_id, "auth0|ghost")

    assert await likes_of(session_factory, event_id) == 0
    assert await like_rows(session_factory, event_id) == 0


@pytest.mark.parametrize("error", [
    OperationalError("UPDATE events", {}, Exception("connection lost")),
    asyncio.CancelledError(),
])
async def test_failure_after_insert_rolls_back(session_factory, error):
    event_id = await create_event(session_factory)
    user_id = await create_user(session_factory, "auth0|u1")

    async with session_factory() as session:
        original_execute = session.execute

        async def failing_execute(statement, *args, **kwargs):
            if getattr(statement, "is_update", False):
                raise error
            return await original_execute(statement, *args, **kwargs)

        session.execute = failing_execute
        with pytest.raises(type(error)):
            await toggle_like(session, event_id, user_id)

    assert await like_rows(session_factory, event_id) == 0
    assert await likes_of(session_factory, event_id) == 0


async def test_counter_drift_is_reported(session_factory):
    consistent = await create_event(session_factory, title="Consistent")
    drifted = await create_event(session_factory, likes=3, title="Drifted")
    user_id = await create_user(session_factory, "auth0|u1")
    await _toggle(session_factory, consistent, user_id)
    await _toggle(session_factory, drifted, user_id)

    async with session_factory() as session:
        drift = await find_counter_drift(session)

    assert [(d.event_id, d.likes, d.actual) for d in drift] == [(drifted, 4, 1)]


async def test_toggle_after_read_on_same_session(session_factory):
    event_id = await create_event(session_factory)
    user_id = await create_user(session_factory, "auth0|u1")

    async with session_factory() as session:
        # чтение открывает транзакцию, как зависимости в запросе FastAPI
        assert await has_liked(session, event_id, user_id) is False
        assert session.in_transaction()

        assert (await toggle_like(session, event_id, user_id)).liked is True
        assert await has_liked(session, event_id, user_id) is True
        assert (await toggle_like(session, event_id, user_id)).liked is False

    assert await likes_of(session_factory, event_id) == 0
    assert await like_rows(session_factory, event_id) == 0
