"""Application settings loaded from the environment.

Domain plumbing (databases, event store, processing mode) is configured in
``domain.toml`` and picked up by Protean; everything the storefront itself
needs (pricing rules, payment gateway credentials, admin seed, redirect URLs,
logging) lives here and is read from ``STOREFRONT_*`` environment variables or a
``.env`` file.
"""

from decimal import Decimal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Storefront configuration."""

    model_config = SettingsConfigDict(
        env_prefix="STOREFRONT_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Pricing rules, process-wide and never mutated at runtime
    tax_rate: Decimal = Field(Decimal("0.08"), ge=0)
    free_shipping_threshold: Decimal = Field(Decimal("100.00"), ge=0)
    flat_shipping_cost: Decimal = Field(Decimal("5.99"), ge=0)
    currency: str = "usd"

    # Payment gateway: "fake" for development and tests, "stripe" for real payments
    payment_gateway: str = "fake"
    stripe_secret_key: str = ""
    stripe_webhook_secret: str = ""
    webhook_secret: str = "whsec_local_development"
    allowed_countries: str = "US,CA,GB"

    # Comma-separated list of emails granted the admin capability
    admin_emails: str = ""

    success_url: str = "http://localhost:5173/order-confirmation?session_id={CHECKOUT_SESSION_ID}"
    cancel_url: str = "http://localhost:5173/cart"
    allowed_origins: str = "*"

    # Logging. The environment picks the renderer and the default level.
    environment: str = Field(
        "development", validation_alias=AliasChoices("STOREFRONT_ENVIRONMENT", "PROTEAN_ENV")
    )
    log_level: str | None = None
    log_dir: str = "logs"
    log_to_files: bool = True
    # Comma-separated loggers held at WARNING
    quiet_loggers: str = "protean,stripe"

    def admin_email_set(self) -> set[str]:
        return {email.strip().lower() for email in self.admin_emails.split(",") if email.strip()}

    def allowed_origin_list(self) -> list[str]:
        if not self.allowed_origins or self.allowed_origins.strip() == "*":
            return ["*"]
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]

    def quiet_logger_list(self) -> list[str]:
        return [name.strip() for name in self.quiet_loggers.split(",") if name.strip()]

    def allowed_country_list(self) -> list[str]:
        return [country.strip().upper() for country in self.allowed_countries.split(",") if country.strip()]


settings = Settings()
