from typing import Optional
from datetime import datetime

from pydantic import BaseModel, Field


class EventCreate(BaseModel):
    title: str = Field(..., min_length=1, description="Название события")
    description: Optional[str] = Field(None, description="Описание")
    date: str = Field(..., min_length=1, description="Дата в свободном формате")
    location: str = Field(..., min_length=1, description="Место проведения")
    image_url: Optional[str] = Field(None, description="Ссылка на обложку")


class EventRead(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    date: str
    location: str
    image_url: Optional[str] = None
    likes: int = Field(..., description="Сколько пользователей лайкнули событие")
    created_by: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True
