from functools import lru_cache
from typing import FrozenSet
from pydantic import AnyHttpUrl, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment with defaults.

    Environment variable mapping follows pydantic's rules (e.g., FX_BASE_URL, FX_MAX_RETRIES, PROMO_TIMEOUT_MS, PROMO_EXPIRY_WARNING_DAYS).
    """

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Basic app metadata
    app_name: str = "Loyalty Points Quote API"
    debug: bool = False
    version: str = "0.1.0"
    host: str = "0.0.0.0"
    port: int = 8080

    # FX rate service
    fx_base_url: AnyHttpUrl = "http://localhost:8081"
    fx_path: str = "/fx"
    fx_max_retries: int = Field(2, ge=0)
    fx_timeout_ms: int = Field(2000, gt=0)
    fx_retry_backoff_ms: int = Field(0, ge=0)  # 0 = retry immediately

    # Promotion service
    promo_base_url: AnyHttpUrl = "http://localhost:8082"
    promo_path: str = "/promo"
    promo_timeout_ms: int = Field(500, gt=0)
    promo_expiry_warning_days: int = Field(3, ge=0)

    # Request policy
    supported_currencies: FrozenSet[str] = frozenset({"USD", "EUR", "GBP"})
    max_fare_amount: float = Field(1_000_000, gt=0)
    max_promo_code_length: int = Field(50, gt=0)

    def init_post_load(self) -> None:
        """Finalize derived fields and reject unusable values."""
        self.supported_currencies = frozenset(
            c.strip().upper() for c in self.supported_currencies
        )
        for name in ("fx_path", "promo_path"):
            value = getattr(self, name)
            if not value.startswith("/"):
                raise ValueError(f"{name} must start with '/', got '{value}'")


@lru_cache
def get_settings() -> Settings:
    settings = Settings()
    settings.init_post_load()
    return settings
