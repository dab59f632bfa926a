from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Mapping, Optional

from .auth import TokenManager
from .client_base import BaseAPIClient, HTTPClient, TransportHTTPError
from .config import ShipPrimusConfig
from .extraction import RESULTS_RULES, first_present
from .normalizer import cheapest_per_service_level, normalize_rates
from .schema import NormalizedRate, RateQuote


logger = logging.getLogger(__name__)


class RateClient:
    """
    Fetches contract rates from ShipPrimus and shapes them for display.

    Authentication is delegated to an injected ``TokenManager``. A 401 on the
    rate lookup triggers exactly one token refresh and one retry; every other
    failure propagates as the transport raised it.
    """

    RATE_ENDPOINT = "database/vendor/contract/{vendor_id}/rate"

    def __init__(
        self,
        token_manager: TokenManager,
        config: ShipPrimusConfig,
        http: Optional[HTTPClient] = None,
    ) -> None:
        self.auth = token_manager
        self.vendor_id = config.vendor_id
        self.http = http or BaseAPIClient(
            base_url=config.base_url,
            timeout=config.rate_timeout,
            retries=0,
        )

    # -------------------------------------------------
    # Public methods
    # -------------------------------------------------
    def fetch_rates(self, params: Optional[Mapping[str, Any]] = None) -> List[Dict[str, Any]]:
        """
        Fetch raw rate entries for the configured vendor.

        Accepts ``{"data": {"results": [...]}}`` or ``{"results": [...]}``;
        any other shape yields an empty list.
        """
        endpoint = self.RATE_ENDPOINT.format(vendor_id=self.vendor_id)
        query = self._encode_query(params or {})

        token = self.auth.get_valid_token()
        try:
            body = self._get(endpoint, query, token)
        except TransportHTTPError as e:
            if e.status_code != 401:
                raise
            logger.warning("Rate lookup returned 401; refreshing token and retrying once")
            token = self.auth.refresh_token(token)
            body = self._get(endpoint, query, token)

        results = first_present(body, RESULTS_RULES)
        if not isinstance(results, list):
            return []
        rates = [r for r in results if isinstance(r, dict)]
        logger.info(f"Fetched {len(rates)} rates for vendor {self.vendor_id}")
        return rates

    def normalize(self, raw_rates: List[Dict[str, Any]]) -> List[NormalizedRate]:
        return normalize_rates(raw_rates)

    def cheapest_per_service_level(self, rows: List[NormalizedRate]) -> List[NormalizedRate]:
        return cheapest_per_service_level(rows)

    def fetch_quote(self, params: Optional[Mapping[str, Any]] = None) -> RateQuote:
        """Fetch, normalize and aggregate in one call."""
        normalized = self.normalize(self.fetch_rates(params))
        return RateQuote(
            data=normalized,
            cheapest=self.cheapest_per_service_level(normalized),
        )

    # -------------------------------------------------
    # Helpers
    # -------------------------------------------------
    def _get(self, endpoint: str, query: Dict[str, Any], token: str) -> Any:
        return self.http.get_json(
            endpoint,
            params=query,
            headers={
                "Authorization": f"Bearer {token}",
                "Accept": "application/json",
            },
        )

    @staticmethod
    def _encode_query(params: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Pass params through as given, except nested structures (e.g. a decoded
        ``freightInfo``), which go over the wire as compact JSON. Flat lists
        stay lists so requests repeats the key.
        """
        query: Dict[str, Any] = {}
        for key, value in params.items():
            nested = isinstance(value, dict) or (
                isinstance(value, (list, tuple))
                and any(isinstance(v, (dict, list, tuple)) for v in value)
            )
            if nested:
                query[key] = json.dumps(value, separators=(",", ":"))
            else:
                query[key] = value
        return query
