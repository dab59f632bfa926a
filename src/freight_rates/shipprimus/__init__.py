"""
Freight Rates - ShipPrimus integration

Authenticates against the ShipPrimus API, fetches contract rate quotes and
reshapes them into rows the rate table can display, plus the cheapest quote
per service level.

Usage:
------
    from freight_rates.shipprimus import ShipPrimusConfig, build_client, get_rate_quotes

    client = build_client(ShipPrimusConfig.from_env())
    payload = get_rate_quotes({"originZipcode": "33126", "freightInfo": "[...]"}, client)
    # {"data": [...], "cheapest": [...]}

Configuration:
--------------
    SHIPPRIMUS_API_BASE          - API root (default: sandbox)
    SHIPPRIMUS_USERNAME          - Login username
    SHIPPRIMUS_PASSWORD          - Login password
    SHIPPRIMUS_VENDOR_ID         - Contract vendor id
    SHIPPRIMUS_AUTH_TIMEOUT_SEC  - Login/refresh timeout (default: 15)
    SHIPPRIMUS_RATE_TIMEOUT_SEC  - Rate lookup timeout (default: 20)
"""

# -----------------------------------------------------------------------------
# Transport
# -----------------------------------------------------------------------------
from .client_base import (
    BaseAPIClient,
    HTTPClient,
    TransportError,
    TransportHTTPError,
    TransportTimeout,
)

# -----------------------------------------------------------------------------
# Configuration
# -----------------------------------------------------------------------------
from .config import ShipPrimusConfig, ShipPrimusConfigError

# -----------------------------------------------------------------------------
# Token lifecycle and rate lookup
# -----------------------------------------------------------------------------
from .auth import AuthError, TokenManager
from .rate_client import RateClient

# -----------------------------------------------------------------------------
# Normalization and schema
# -----------------------------------------------------------------------------
from .normalizer import cheapest_per_service_level, normalize_rate, normalize_rates
from .schema import AccessToken, NormalizedRate, RateQuote

# -----------------------------------------------------------------------------
# Request boundary
# -----------------------------------------------------------------------------
from .service import ClientInputError, build_client, get_rate_quotes, prepare_query


__all__ = [
    # Transport
    "BaseAPIClient",
    "HTTPClient",
    "TransportError",
    "TransportHTTPError",
    "TransportTimeout",
    # Configuration
    "ShipPrimusConfig",
    "ShipPrimusConfigError",
    # Services
    "AuthError",
    "TokenManager",
    "RateClient",
    # Normalizer
    "normalize_rate",
    "normalize_rates",
    "cheapest_per_service_level",
    # Schema
    "AccessToken",
    "NormalizedRate",
    "RateQuote",
    # Boundary
    "ClientInputError",
    "build_client",
    "get_rate_quotes",
    "prepare_query",
]
