from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    database_url: str | None = None  # e.g. sqlite+aiosqlite:///./hotels.db
    seed_demo_data: bool = False
    use_in_memory: bool = True
    stripe_api_key: str | None = Field(default=None, alias="STRIPE_SECRET_KEY")

    default_supplier: str = "LOCAL"
    supplier_timeout_seconds: float = 10.0

    hotelbeds_api_key: str | None = None
    hotelbeds_api_secret: str | None = None
    hotelbeds_base_url: str = "https://api.test.hotelbeds.com"
    hotelbeds_source_market: str = "GB"
    hotelbeds_currency: str = "GBP"
    hotelbeds_language: str = "ENG"

    ratehawk_key_id: str | None = None
    ratehawk_api_key: str | None = None
    ratehawk_base_url: str = "https://api.worldota.net/api/b2b/v3"
    ratehawk_language: str = "en"
    ratehawk_currency: str = "GBP"
    ratehawk_residency: str = "gb"

    upstash_redis_rest_url: str | None = None
    upstash_redis_rest_token: str | None = None

    search_rate_limit: int = 30
    search_rate_window_seconds: int = 60

    # Business constants kept configurable per supplier contract
    prebook_price_tolerance: float = 0.05
    cancellation_full_refund_hours: int = 24
    cancellation_partial_refund_hours: int = 12
    cancellation_partial_refund_ratio: float = 0.5

    # Synthetic inventory ids never hit a live supplier
    test_inventory_id_min: int = 100000
    test_inventory_id_max: int = 200000


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
