# utils/seed_db.py
import asyncio
import logging
import random

from core.database import AsyncSessionLocal, engine
from core.id_generator import generate_random_id
from models.base import Base
from models.user import ROLE_ADMIN, ROLE_STAFF, ROLE_USER, User
from models.event import Event
from models.event_like import EventLike  # noqa: F401
from services.likes import find_counter_drift, toggle_like

log = logging.getLogger(__name__)

# Константы для семплов
NUM_FANS = 25
NUM_TOGGLES = 120

FIRST_NAMES = [
    "Amani", "Baraka", "Neema", "Juma", "Zawadi", "Imani", "Tumaini", "Asha", "Faraji", "Rehema",
]

EVENTS = [
    ("Mwanza Live", "Rock City Mall, Mwanza", "2026-11-14"),
    ("Lake Zone Tour: Musoma", "Musoma Stadium", "2026-11-28"),
    ("Dar Night Session", "Coco Beach, Dar es Salaam", "2026-12-12"),
    ("New Year Concert", "CCM Kirumba, Mwanza", "2026-12-31"),
]


async def seed():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as session:
        admin = User(id="admin-default", email="Admin@kiarutara.com", first_name="Admin", role=ROLE_ADMIN)
        staff = User(id=generate_random_id("users"), first_name="Stage", last_name="Manager", role=ROLE_STAFF)
        fans = [
            User(
                id=generate_random_id("users"),
                first_name=random.choice(FIRST_NAMES),
                email=f"fan{i}@example.com",
                role=ROLE_USER,
            )
            for i in range(NUM_FANS)
        ]
        session.add_all([admin, staff, *fans])

        events = [
            Event(title=title, location=location, date=date, created_by=staff.id)
            for title, location, date in EVENTS
        ]
        session.add_all(events)
        await session.commit()

        # Лайки только через toggle_like, чтобы счётчики сошлись с event_likes
        for _ in range(NUM_TOGGLES):
            fan = random.choice(fans)
            event = random.choice(events)
            await toggle_like(session, event.id, fan.id)

        drift = await find_counter_drift(session)
        if drift:
            raise RuntimeError(f"Seeded likes drifted: {drift}")

    await engine.dispose()
    log.info("DB seeded: %d fans, %d events", NUM_FANS, len(EVENTS))


if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO)
    asyncio.run(seed())
