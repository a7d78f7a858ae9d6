from __future__ import annotations

import os
from urllib.parse import urlparse

from pydantic import BaseModel, field_validator

from ..application.use_cases import DEFAULT_REQUEST_DELAY
from ..infrastructure.mollie.payment_link_client import (
    DEFAULT_BASE_URL,
    DEFAULT_CURRENCY,
    DEFAULT_REDIRECT_URL,
)


class Settings(BaseModel):
    """Typed settings for the command line tool, sourced from env vars."""

    api_base_url: str = DEFAULT_BASE_URL
    currency: str = DEFAULT_CURRENCY
    redirect_url: str = DEFAULT_REDIRECT_URL
    request_delay: float = DEFAULT_REQUEST_DELAY
    http_timeout: float = 10.0

    @field_validator("api_base_url", "redirect_url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        if not v:
            raise ValueError("URL cannot be empty")
        parsed = urlparse(v)
        if parsed.scheme not in {"http", "https"}:
            raise ValueError("URL must start with http:// or https://")
        if not parsed.netloc:
            raise ValueError("URL must include a host")
        return v

    @field_validator("currency")
    @classmethod
    def validate_currency(cls, v: str) -> str:
        if len(v) != 3 or not v.isalpha() or not v.isupper():
            raise ValueError("Currency must be a 3-letter uppercase ISO 4217 code")
        return v

    @field_validator("request_delay")
    @classmethod
    def validate_request_delay(cls, v: float) -> float:
        if v < 0:
            raise ValueError("Request delay cannot be negative")
        return v

    @field_validator("http_timeout")
    @classmethod
    def validate_http_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("HTTP timeout must be positive")
        return v


def get_settings() -> Settings:
    """Return typed settings instance sourced from env vars."""
    return Settings(
        api_base_url=os.environ.get("PLINKS_API_BASE_URL", DEFAULT_BASE_URL),
        currency=os.environ.get("PLINKS_CURRENCY", DEFAULT_CURRENCY),
        redirect_url=os.environ.get("PLINKS_REDIRECT_URL", DEFAULT_REDIRECT_URL),
        request_delay=float(
            os.environ.get("PLINKS_REQUEST_DELAY", str(DEFAULT_REQUEST_DELAY))
        ),
        http_timeout=float(os.environ.get("PLINKS_HTTP_TIMEOUT", "10.0")),
    )
