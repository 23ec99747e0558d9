from typing import Optional
from datetime import datetime

from pydantic import BaseModel, Field


class UserRead(BaseModel):
    id: str = Field(..., description="sub из Auth0")
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None
    role: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class RoleUpdate(BaseModel):
    role: str = Field(..., description="Одна из ролей: 'user', 'staff', 'admin'")


class MessageResponse(BaseModel):
    message: str
