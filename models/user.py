# models/user.py
from sqlalchemy import Column, DateTime, String
from sqlalchemy.sql import func

from .base import Base

ROLE_USER = "user"
ROLE_STAFF = "staff"
ROLE_ADMIN = "admin"
ROLES = (ROLE_USER, ROLE_STAFF, ROLE_ADMIN)


class User(Base):
    __tablename__ = "users"

    # sub из токена Auth0
    id = Column(String, primary_key=True, index=True)
    email = Column(String, unique=True, nullable=True)
    first_name = Column(String, nullable=True)
    last_name = Column(String, nullable=True)
    profile_image_url = Column(String, nullable=True)
    role = Column(String(16), nullable=False, default=ROLE_USER, server_default=ROLE_USER)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    # created_at/updated_at возвращаются RETURNING сразу при flush
    __mapper_args__ = {"eager_defaults": True}

    def __repr__(self):
        return f"<User id={self.id} role={self.role}>"
