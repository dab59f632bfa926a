from __future__ import annotations

import os
from typing import Any, Optional
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator


DEFAULT_BASE_URL = "https://sandbox-api.shipprimus.com/api/v1"
DEFAULT_VENDOR_ID = "1901539643"
DEFAULT_AUTH_TIMEOUT_SEC = 15.0
DEFAULT_RATE_TIMEOUT_SEC = 20.0


class ShipPrimusConfigError(RuntimeError):
    """Raised when required environment configuration is missing or invalid."""


class ShipPrimusConfig(BaseModel):
    """
    Credentials and deployment settings for the ShipPrimus API.

    Supplied once at construction and never mutated afterwards.
    """

    model_config = ConfigDict(frozen=True)

    base_url: str = Field(DEFAULT_BASE_URL, description="API root, e.g. .../api/v1")
    username: Optional[str] = Field(None, description="Login username")
    password: Optional[str] = Field(None, repr=False, description="Login password")
    vendor_id: str = Field(DEFAULT_VENDOR_ID, description="Contract vendor identifier")
    auth_timeout: float = Field(DEFAULT_AUTH_TIMEOUT_SEC, gt=0, description="Login/refresh timeout (s)")
    rate_timeout: float = Field(DEFAULT_RATE_TIMEOUT_SEC, gt=0, description="Rate lookup timeout (s)")

    # ------------------------------
    # Field Validators (Pydantic v2)
    # ------------------------------

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v):
        parsed = urlparse(v)
        if not parsed.scheme or not parsed.netloc:
            raise ValueError(f"base_url is not a valid URL: '{v}'")
        return v

    @classmethod
    def from_env(cls, **overrides: Any) -> "ShipPrimusConfig":
        """
        Build the config from environment variables:

            SHIPPRIMUS_API_BASE          - API root (default: sandbox)
            SHIPPRIMUS_USERNAME          - Login username
            SHIPPRIMUS_PASSWORD          - Login password
            SHIPPRIMUS_VENDOR_ID         - Contract vendor id
            SHIPPRIMUS_AUTH_TIMEOUT_SEC  - Auth call timeout (default: 15)
            SHIPPRIMUS_RATE_TIMEOUT_SEC  - Rate call timeout (default: 20)

        Keyword overrides win over the environment; ``None`` overrides are ignored.
        """
        values = {
            "base_url": os.getenv("SHIPPRIMUS_API_BASE", DEFAULT_BASE_URL),
            "username": os.getenv("SHIPPRIMUS_USERNAME") or None,
            "password": os.getenv("SHIPPRIMUS_PASSWORD") or None,
            "vendor_id": os.getenv("SHIPPRIMUS_VENDOR_ID", DEFAULT_VENDOR_ID),
            "auth_timeout": _env_seconds("SHIPPRIMUS_AUTH_TIMEOUT_SEC", DEFAULT_AUTH_TIMEOUT_SEC),
            "rate_timeout": _env_seconds("SHIPPRIMUS_RATE_TIMEOUT_SEC", DEFAULT_RATE_TIMEOUT_SEC),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})

        try:
            return cls(**values)
        except ValidationError as e:
            raise ShipPrimusConfigError(f"Invalid ShipPrimus configuration: {e}") from e


def _env_seconds(name: str, default: float) -> float:
    raw = os.getenv(name, str(default)).strip()
    try:
        seconds = float(raw)
    except ValueError as e:
        raise ShipPrimusConfigError(
            f"{name} must be a number, got '{raw}'."
        ) from e
    if not seconds > 0:
        raise ShipPrimusConfigError(
            f"{name} must be greater than zero, got '{raw}'."
        )
    return seconds
