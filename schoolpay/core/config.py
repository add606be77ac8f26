from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    DATABASE_URL: str

    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    JWT_SECRET: str
    JWT_ISSUER: str = "schoolpay"
    ACCESS_TTL_MIN: int = 24 * 60

    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://localhost:3001",
    ]

    # school / trustee this deployment collects for
    SCHOOL_ID: str
    DEFAULT_TRUSTEE_ID: str

    GATEWAY_NAME: str = "Edviron"
    GATEWAY_BASE_URL: str = "https://dev-vanilla.edviron.com/erp"
    GATEWAY_TIMEOUT_SECONDS: float = 10.0
    PAYMENT_API_KEY: str
    PAYMENT_PG_KEY: str
    DEFAULT_CALLBACK_URL: str = "https://google.com"


@lru_cache
def get_settings() -> Settings:
    return Settings()
