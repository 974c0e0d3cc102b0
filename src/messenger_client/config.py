from __future__ import annotations

from pydantic import ConfigDict
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    POSTGRES_USER: str
    POSTGRES_PASSWORD: str
    POSTGRES_DB: str
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432

    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10
    DB_POOL_RECYCLE: int = 300

    REDIS_URL: str = "redis://localhost:6379/0"
    REDIS_MESSAGES_CHANNEL: str = "messages.inserted"

    TYPING_TIMEOUT_SECONDS: float = 3.0
    CALL_TICK_SECONDS: float = 1.0

    SESSION_FILE: str = ".messenger_session.json"
    SESSION_USER_KEY: str = "messenger-user-id"

    AVATAR_BASE_URL: str = "https://api.dicebear.com/8.x/initials/svg?seed="

    MEDIA_ALLOW_VIDEO: bool = True
    MEDIA_ALLOW_AUDIO: bool = True

    CORS_ORIGINS: list[str] = ["*"]
    WS_HEARTBEAT_SECONDS: int = 30

    @property
    def database_url(self) -> str:
        return (
            f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.POSTGRES_DB}"
        )

    model_config = ConfigDict(
        env_file=".env",
        extra="ignore",
    )


settings = Settings()  # type: ignore[call-arg]
