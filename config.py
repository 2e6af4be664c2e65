"""
Runtime configuration, read from the environment (and a local .env file).
"""

import os
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from dotenv import load_dotenv

LOG_LEVELS = {
    "production": "INFO",
    "staging": "INFO",
    "development": "DEBUG",
    "test": "WARNING",
}


@dataclass(frozen=True)
class Settings:
    database_url: Optional[str] = None
    database_name: Optional[str] = None
    razorpay_key_id: Optional[str] = None
    razorpay_key_secret: Optional[str] = None
    auth_salt: str = "storefront"
    environment: str = "development"
    log_level: str = "INFO"
    shipping_amount: Decimal = Decimal("5.00")
    default_currency: str = "INR"

    @property
    def database_configured(self) -> bool:
        return bool(self.database_url and self.database_name)

    @property
    def payments_configured(self) -> bool:
        return bool(self.razorpay_key_id and self.razorpay_key_secret)


def load_settings() -> Settings:
    load_dotenv()
    environment = os.getenv("ENVIRONMENT", "development").lower()
    return Settings(
        database_url=os.getenv("DATABASE_URL") or None,
        database_name=os.getenv("DATABASE_NAME") or None,
        razorpay_key_id=os.getenv("RAZORPAY_KEY_ID") or None,
        razorpay_key_secret=os.getenv("RAZORPAY_KEY_SECRET") or None,
        auth_salt=os.getenv("AUTH_SALT", "storefront"),
        environment=environment,
        log_level=os.getenv("LOG_LEVEL", LOG_LEVELS.get(environment, "INFO")).upper(),
        shipping_amount=Decimal(os.getenv("SHIPPING_AMOUNT", "5.00")),
        default_currency=os.getenv("PAYMENT_CURRENCY", "INR"),
    )
