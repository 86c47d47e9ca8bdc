from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from payit.core.errors import ConfigurationError

# Later files win; the process environment wins over every file.
ENV_FILES: tuple[str, ...] = (str(Path("..") / ".env.local"), ".env.local")

PRICE_ENV = "PAYIT_PRODUCT_PRICE_CENTS"

_PRICE_RE = re.compile(r"[+-]?[0-9]+")
_MAX_PRICE_CENTS = 2**63 - 1
_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=ENV_FILES,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Stripe
    stripe_secret_key: str = Field(default="", alias="PAYIT_STRIPE_SECRET_KEY")
    stripe_publishable_key: str = Field(
        default="", alias="PAYIT_STRIPE_PUBLISHABLE_KEY"
    )

    # Product
    product_name: str = Field(default="", alias="PAYIT_PRODUCT_NAME")
    product_description: str = Field(default="", alias="PAYIT_PRODUCT_DESCRIPTION")
    product_price_cents: str = Field(default="", alias=PRICE_ENV)
    product_currency: str = Field(default="", alias="PAYIT_PRODUCT_CURRENCY")
    product_success_url: str = Field(default="", alias="PAYIT_PRODUCT_SUCCESS_URL")
    product_cancel_url: str = Field(default="", alias="PAYIT_PRODUCT_CANCEL_URL")

    # App
    app_env: str = Field(default="development", alias="APP_ENV")
    log_level: str = Field(default="INFO", alias="PAYIT_LOG_LEVEL")
    provider_timeout_seconds: float = Field(
        default=10.0, gt=0, alias="PAYIT_PROVIDER_TIMEOUT_SECONDS"
    )
    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=8080, ge=1, le=65535, alias="PORT")

    # Observability
    sentry_dsn: str | None = Field(default=None, alias="SENTRY_DSN")
    sentry_traces_sample_rate: float = Field(
        default=0.0, alias="SENTRY_TRACES_SAMPLE_RATE"
    )

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        level = (value or "").strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"unknown log level: {value}")
        return level

    def missing_fields(self) -> list[str]:
        required = (
            ("PAYIT_STRIPE_SECRET_KEY", self.stripe_secret_key),
            ("PAYIT_STRIPE_PUBLISHABLE_KEY", self.stripe_publishable_key),
            ("PAYIT_PRODUCT_NAME", self.product_name),
            ("PAYIT_PRODUCT_DESCRIPTION", self.product_description),
            (PRICE_ENV, self.product_price_cents.strip()),
            ("PAYIT_PRODUCT_CURRENCY", self.product_currency),
            ("PAYIT_PRODUCT_SUCCESS_URL", self.product_success_url),
            ("PAYIT_PRODUCT_CANCEL_URL", self.product_cancel_url),
        )
        return [name for name, value in required if value == ""]


@dataclass(frozen=True)
class ProductConfig:
    name: str
    description: str
    price_cents: int
    currency: str
    success_url: str
    cancel_url: str


@dataclass(frozen=True)
class Config:
    stripe_secret_key: str
    stripe_publishable_key: str
    product: ProductConfig
    app_env: str = "development"
    log_level: str = "INFO"
    provider_timeout_seconds: float = 10.0
    host: str = "0.0.0.0"
    port: int = 8080
    sentry_dsn: str | None = None
    sentry_traces_sample_rate: float = 0.0


def parse_price(value: str) -> int:
    """Parse a base-10 amount in minor currency units; it must be positive."""
    raw = value.strip()
    if not _PRICE_RE.fullmatch(raw):
        raise ConfigurationError(f"{PRICE_ENV} must be a positive integer")
    price = int(raw)
    if price <= 0 or price > _MAX_PRICE_CENTS:
        raise ConfigurationError(f"{PRICE_ENV} must be a positive integer")
    return price


def load_config(*, env_file: tuple[str, ...] | str | None = ENV_FILES) -> Config:
    """
    Build the process configuration from the environment.

    Values from `env_file` apply only to keys not already present in the process
    environment. Every missing required variable is reported in one error; the
    price is validated only once nothing is missing.
    """
    try:
        settings = Settings(_env_file=env_file)  # type: ignore[call-arg]
    except ValidationError as exc:
        names = sorted({str(err["loc"][0]) for err in exc.errors() if err["loc"]})
        raise ConfigurationError(
            f"invalid environment variables: {', '.join(names)}"
        ) from exc

    missing = settings.missing_fields()
    if missing:
        raise ConfigurationError(
            f"missing required environment variables: {', '.join(missing)}",
            missing=tuple(missing),
        )

    product = ProductConfig(
        name=settings.product_name,
        description=settings.product_description,
        price_cents=parse_price(settings.product_price_cents),
        currency=settings.product_currency,
        success_url=settings.product_success_url,
        cancel_url=settings.product_cancel_url,
    )
    return Config(
        stripe_secret_key=settings.stripe_secret_key,
        stripe_publishable_key=settings.stripe_publishable_key,
        product=product,
        app_env=settings.app_env,
        log_level=settings.log_level,
        provider_timeout_seconds=settings.provider_timeout_seconds,
        host=settings.host,
        port=settings.port,
        sentry_dsn=settings.sentry_dsn or None,
        sentry_traces_sample_rate=max(0.0, min(settings.sentry_traces_sample_rate, 1.0)),
    )
