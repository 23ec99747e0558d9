from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):

    DATABASE_URL: str = "sqlite+aiosqlite:///./kiarutara.db"

    AUTH0_DOMAIN: Optional[str] = None
    AUTH0_AUDIENCE: Optional[str] = None
    AUTH0_ALGORITHM: str = "RS256"
    AUTH0_CLIENT_SECRET: Optional[str] = None

    DEFAULT_ADMIN_EMAIL: str = "Admin@kiarutara.com"
    CORS_ORIGINS: str = "*"
    DEBUG: bool = False

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    @property
    def cors_origins(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def auth0_issuer(self) -> Optional[str]:
        if not self.AUTH0_DOMAIN:
            return None
        return f"https://{self.AUTH0_DOMAIN.rstrip('/')}/"


# Создаём глобальный объект, который будем импортировать везде
settings = Settings()
