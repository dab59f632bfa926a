"""
Boundary between an inbound request (web handler, CLI) and the rate client.

The caller hands over the raw query mapping; ``freightInfo`` may arrive as a
JSON-encoded string and is decoded here before anything reaches ShipPrimus.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Mapping, Optional

from .auth import TokenManager
from .config import ShipPrimusConfig
from .rate_client import RateClient


logger = logging.getLogger(__name__)

FREIGHT_INFO_KEY = "freightInfo"


class ClientInputError(ValueError):
    """Raised when the caller-supplied query cannot be used as-is."""


def prepare_query(query: Mapping[str, Any]) -> Dict[str, Any]:
    """Copy ``query``, decoding a string ``freightInfo`` into its JSON value."""
    params = dict(query)
    freight_info = params.get(FREIGHT_INFO_KEY)
    if isinstance(freight_info, str):
        try:
            params[FREIGHT_INFO_KEY] = json.loads(freight_info)
        except ValueError as e:
            raise ClientInputError("Invalid freightInfo JSON") from e
    return params


def get_rate_quotes(
    query: Mapping[str, Any], client: RateClient
) -> Dict[str, List[Dict[str, Any]]]:
    """
    Return ``{"data": [...], "cheapest": [...]}`` for the given query.

    Raises ClientInputError before any network call if the query is malformed;
    AuthError and TransportError propagate from the client.
    """
    params = prepare_query(query)
    return client.fetch_quote(params).to_payload()


def build_client(config: Optional[ShipPrimusConfig] = None) -> RateClient:
    """Wire a RateClient and its TokenManager from config (default: environment)."""
    config = config or ShipPrimusConfig.from_env()
    logger.info(f"Building ShipPrimus rate client for {config.base_url}")
    return RateClient(TokenManager(config), config)
