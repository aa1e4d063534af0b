"""Storefront Service Configuration"""

from typing import Optional
from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment"""

    # Application
    app_name: str = "GlamorousDesi Storefront"
    debug: bool = True
    host: str = "0.0.0.0"
    port: int = 8001

    # Public URL used to build payment redirect targets
    public_base_url: str = "http://localhost:3000"

    # Payments
    payment_provider: str = "fake"  # "fake" or "stripe"
    stripe_secret_key: Optional[str] = None
    currency: str = "usd"
    checkout_session_ttl_minutes: int = 30
    allowed_shipping_countries: list[str] = ["US", "CA", "GB", "AU"]

    # Orders
    order_number_prefix: str = "GD"
    reserve_stock_on_checkout: bool = True

    # Catalog
    default_page_size: int = 12
    max_page_size: int = 100

    # Client cart
    cart_storage_key: str = "glamorousdesi-cart"
    cart_auto_close_seconds: float = 3.0

    class Config:
        env_file = "config/.env"
        env_file_encoding = "utf-8"
        case_sensitive = False

    @property
    def stripe_configured(self) -> bool:
        """Check if Stripe credentials are configured"""
        return bool(self.stripe_secret_key)


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()
