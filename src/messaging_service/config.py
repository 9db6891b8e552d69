from __future__ import annotations

import socket
from typing import Literal

from pydantic import ConfigDict, Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    POSTGRES_USER: str
    POSTGRES_PASSWORD: str
    POSTGRES_DB: str
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432

    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    DB_POOL_RECYCLE: int = 300
    DB_POOL_TIMEOUT: float = 10.0
    DB_COMMAND_TIMEOUT: float = 5.0

    REDIS_URL: str = "redis://localhost:6379/0"

    JWT_SECRET: str = ""
    JWT_VERIFY_MODE: Literal["hs256", "jwks"] = "hs256"
    JWT_ALGORITHM: str = "HS256"
    JWKS_URL: str | None = None

    CORS_ORIGINS: list[str] = ["*"]

    LOG_LEVEL: str = "INFO"

    CONVERSATION_PAGE_LIMIT: int = 20
    MESSAGE_PAGE_LIMIT: int = 50

    STORE_RETRY_AFTER_SECONDS: int = 2

    OUTBOX_POLL_INTERVAL: float = 1.0
    OUTBOX_BATCH_SIZE: int = 50
    OUTBOX_MAX_ATTEMPTS: int = 5

    MESSAGING_EVENTS_CHANNEL: str = "messaging.events"

    ACCOUNT_EVENTS_STREAM: str = "accounts.events"
    ACCOUNT_EVENTS_GROUP: str = "messaging-service"
    ACCOUNT_EVENTS_CONSUMER: str = Field(default_factory=socket.gethostname)
    ACCOUNT_EVENTS_MAX_DELIVERIES: int = 5

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
