from typing import Literal

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Mercado Pago
    mercadopago_access_token: str = ""
    mercadopago_api_base: str = "https://api.mercadopago.com"
    mercadopago_currency: str = "ARS"
    mercadopago_statement_descriptor: str = "BAUL DE MODA"

    # External order/settings API
    api_base: str = Field(
        default="",
        validation_alias=AliasChoices("api_base", "next_public_api_base", "next_public_api_base_url"),
    )
    public_base_url: str = "http://localhost:3000"

    # Exchange rate
    usd_exchange_rate: float = 1000.0
    exchange_rate_source_url: str | None = None
    exchange_rate_cache_ttl_seconds: int = 3600

    redis_enabled: bool = True
    redis_url: str = "redis://localhost:6379/0"

    http_timeout_seconds: float = 10.0
    http_host: str = "0.0.0.0"
    http_port: int = 8000

    log_level: str = "INFO"
    log_format: Literal["json", "console"] = "json"

    metrics_enabled: bool = True
    metrics_host: str = "0.0.0.0"
    metrics_port: int = 9090

    @field_validator("api_base")
    @classmethod
    def normalize_api_base(cls, value: str) -> str:
        base = value.rstrip("/")
        if base and not base.endswith("/api"):
            base = f"{base}/api"
        return base

    @field_validator("public_base_url", "mercadopago_api_base")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


settings = Settings()
