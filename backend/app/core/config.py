from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_PRICING_CATALOG = Path(__file__).resolve().parent.parent / "data" / "pricing.json"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=None, extra="ignore")

    ENV: str = "prod"
    LOG_LEVEL: str = "INFO"

    # Identity provider (Supabase) and its database; the app refuses to boot without them
    SUPABASE_URL: str = Field(min_length=1)
    SUPABASE_SERVICE_ROLE_KEY: str = Field(min_length=1)
    SUPABASE_JWT_SECRET: str = Field(min_length=1)
    JWT_AUDIENCE: str = "authenticated"

    DATABASE_URL: str = Field(min_length=1)

    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 5
    DB_POOL_TIMEOUT_SECONDS: int = 30
    DB_POOL_RECYCLE_SECONDS: int = 1800
    DB_CONNECT_TIMEOUT_SECONDS: int = 5
    DB_STATEMENT_TIMEOUT_MS: int = 5000

    ALLOWED_HOSTS: str = "localhost,127.0.0.1"
    ALLOWED_ORIGINS: str = "http://localhost:5173,http://localhost:3000"
    SECURITY_HEADERS_ENABLED: bool = True

    # Pricing / checkout
    PRICING_CATALOG_PATH: str = str(DEFAULT_PRICING_CATALOG)
    CHECKOUT_PROVIDER: str = "nowpayments"
    CHECKOUT_CURRENCY: str = "USD"
    CHECKOUT_URL_TEMPLATE: str = "https://nowpayments.io/payment?orderId={order_id}"

    # Prediction throttling (fixed window per identity)
    PREDICTION_RATE_LIMIT: int = 10
    PREDICTION_RATE_WINDOW_SECONDS: int = 60
    RATE_LIMIT_RETENTION_HOURS: int = 24

    @field_validator("SUPABASE_URL", "SUPABASE_SERVICE_ROLE_KEY", "SUPABASE_JWT_SECRET", "DATABASE_URL")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value.strip()

    @property
    def token_issuer(self) -> str:
        return self.SUPABASE_URL.rstrip("/") + "/auth/v1"


settings = Settings()
