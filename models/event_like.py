# models/event_like.py
from sqlalchemy import Column, DateTime, ForeignKey, String, UniqueConstraint
from sqlalchemy.sql import func

from .base import Base

EVENT_LIKE_UNIQUE = "uq_event_likes_event_user"


class EventLike(Base):
    __tablename__ = "event_likes"

    id = Column(String, primary_key=True, index=True)
    event_id = Column(String, ForeignKey("events.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint("event_id", "user_id", name=EVENT_LIKE_UNIQUE),
    )

    def __repr__(self):
        return f"<EventLike {self.user_id}→{self.event_id}>"
