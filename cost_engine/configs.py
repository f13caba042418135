"""Application settings loaded from environment variables.

Defines all environment-driven configuration used by the cost data engine.
"""

from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

SIX_MONTHS_SECONDS = 180 * 24 * 60 * 60


class Settings(BaseSettings):
    """Typed configuration model for the cost data engine."""

    # Cache store
    CACHE_BACKEND: Literal["memory", "file", "redis"] = "memory"
    CACHE_TTL_SECONDS: int = Field(SIX_MONTHS_SECONDS, gt=0)
    CACHE_MAX_ENTRIES: int = Field(1000, gt=0)
    CACHE_FILE_PATH: str = "./cache/cost-data"

    # Redis configuration
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_PASSWORD: Optional[str] = None
    REDIS_SSL: bool = False
    REDIS_KEY_PREFIX: str = "cost-data:"

    # Metered pricing API
    NUMBEO_API_URL: str = "https://www.numbeo.com/api/city_prices"
    NUMBEO_API_KEY: Optional[str] = None
    NUMBEO_MIN_INTERVAL_SECONDS: float = Field(1.0, ge=0)

    # Scraped community pricing site
    EXPATISTAN_BASE_URL: str = "https://www.expatistan.com/cost-of-living"
    EXPATISTAN_MIN_INTERVAL_SECONDS: float = Field(2.0, ge=2.0)

    # Public exchange rates
    EXCHANGE_RATE_API_URL: str = "https://api.exchangerate-api.com/v4/latest/USD"

    # Aggregation
    PROVIDER_TIMEOUT_SECONDS: float = Field(10.0, gt=0)
    HTTP_TIMEOUT_SECONDS: float = Field(8.0, gt=0)

    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()
