# backend/woundcrm/core/config.py

from __future__ import annotations

from decimal import Decimal

from pydantic_settings import BaseSettings, SettingsConfigDict

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # -----------------------------
    # Environment
    # -----------------------------
    # Use: development | staging | production
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # -----------------------------
    # Invoicing
    # -----------------------------
    # Fraction of the total billable amount that is invoiced.
    INVOICE_RATE: Decimal = Decimal("0.60")
    # Days between invoice date and due (payable) date.
    PAYABLE_TERM_DAYS: int = 30
    CURRENCY: str = "USD"

    # -----------------------------
    # Commissions
    # -----------------------------
    # Fraction of the invoice amount set aside for rep + house commission.
    COMMISSION_POOL_RATE: Decimal = Decimal("0.40")

    def model_post_init(self, __context) -> None:  # pydantic v2 hook
        for name in ("INVOICE_RATE", "COMMISSION_POOL_RATE"):
            value = getattr(self, name)
            if not (Decimal("0") < value <= Decimal("1")):
                raise ValueError(f"{name} must be a fraction in (0, 1]; got {value}")

        if self.PAYABLE_TERM_DAYS < 0:
            raise ValueError("PAYABLE_TERM_DAYS cannot be negative.")

        if self.LOG_LEVEL.strip().upper() not in _LOG_LEVELS:
            raise ValueError(f"Unsupported LOG_LEVEL={self.LOG_LEVEL!r}. Allowed: {sorted(_LOG_LEVELS)}")


settings = Settings()
