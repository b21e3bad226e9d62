from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import PostgresDsn, computed_field
from typing import Optional

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_ignore_empty=True, extra="ignore")

    # Security: Remove default credentials - require them to be set in .env
    POSTGRES_USER: str
    POSTGRES_PASSWORD: str
    POSTGRES_DB: str = "devmatch"
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432

    @computed_field
    def DATABASE_URL(self) -> PostgresDsn:
        return PostgresDsn.build(
            scheme="postgresql+asyncpg",
            username=self.POSTGRES_USER,
            password=self.POSTGRES_PASSWORD,
            host=self.POSTGRES_HOST,
            port=self.POSTGRES_PORT,
            path=self.POSTGRES_DB,
        )

    APP_DOMAIN: Optional[str] = None

    # Signs session tokens and realtime connection credentials
    SESSION_SECRET: str
    SESSION_TOKEN_TTL_SECONDS: int = 7 * 24 * 3600  # 1 week

    # Shared secret of the identity provider callback
    IDENTITY_WEBHOOK_SECRET: Optional[str] = None

    # Realtime channel
    REALTIME_TOKEN_TTL_SECONDS: int = 3600  # 0 disables expiry
    REALTIME_ALLOW_LEGACY_PARAMS: bool = False  # Raw ?matchId=&userId= connections

    # Rate limits (per user, per minute)
    SWIPES_PER_MINUTE: int = 60
    MESSAGES_PER_MINUTE: int = 30

settings = Settings()
