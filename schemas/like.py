from pydantic import BaseModel, Field


class LikeResponse(BaseModel):
    liked: bool = Field(..., description="Стоит ли лайк пользователя после операции")

    class Config:
        from_attributes = True


class CounterDrift(BaseModel):
    event_id: str
    likes: int = Field(..., description="Значение счётчика events.likes")
    actual: int = Field(..., description="Фактическое число строк в event_likes")
