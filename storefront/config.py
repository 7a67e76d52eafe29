from decimal import Decimal
from typing import Optional
from urllib.parse import quote_plus

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    env: str = "local"
    log_level: str = "INFO"

    database_url_override: Optional[str] = None
    postgres_user: str = "postgres"
    postgres_password: str = ""
    postgres_db: str = "storefront"
    postgres_host: str = "localhost"
    postgres_port: str = "5432"

    secret_key: str
    algorithm: str = "HS256"

    # pricing
    free_shipping_threshold: Decimal = Decimal("100.00")
    shipping_flat_rate: Decimal = Decimal("10.00")
    tax_rate: Decimal = Decimal("0.10")

    # checkout
    checkout_timeout_seconds: float = 10.0
    order_number_attempts: int = 3
    stock_retry_attempts: int = 3
    stock_retry_backoff_seconds: float = 0.05
    release_retry_attempts: int = 5
    reservation_stale_minutes: int = 15
    low_stock_threshold: int = 5

    @property
    def database_url(self):
        if self.database_url_override:
            return self.database_url_override
        encoded_password = quote_plus(self.postgres_password)
        return (
            f"postgresql+psycopg2://{self.postgres_user}:"
            f"{encoded_password}@{self.postgres_host}:"
            f"{self.postgres_port}/{self.postgres_db}"
        )

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "allow"

settings = Settings()
