from __future__ import annotations

import base64
import binascii
import json
import logging
import threading
import time
from datetime import datetime, timezone
from typing import Callable, Optional

from .client_base import BaseAPIClient, HTTPClient, TransportError
from .config import ShipPrimusConfig
from .extraction import (
    ACCESS_TOKEN_RULES,
    REFRESHED_TOKEN_RULES,
    first_present,
    is_nonempty_text,
)
from .schema import AccessToken


logger = logging.getLogger(__name__)


class AuthError(RuntimeError):
    """Raised when a login or refresh call fails or returns no token."""


class TokenManager:
    """
    Owns the ShipPrimus bearer token for one set of credentials.

    The token lives in memory only. ``get_valid_token`` reuses it while its
    ``exp`` claim is more than ``EXPIRY_MARGIN_SECONDS`` away and logs in
    again otherwise; ``refresh_token`` is called by the rate client after a
    401. Both read-modify-write sequences run under one lock, so concurrent
    callers never interleave a stale read with a store.
    """

    EXPIRY_MARGIN_SECONDS = 10
    LOGIN_ENDPOINT = "login"
    REFRESH_ENDPOINT = "refreshtoken"

    def __init__(
        self,
        config: ShipPrimusConfig,
        http: Optional[HTTPClient] = None,
        clock: Callable[[], float] = time.time,
        initial_token: Optional[str] = None,
    ) -> None:
        self.config = config
        self.http = http or BaseAPIClient(
            base_url=config.base_url,
            timeout=config.auth_timeout,
            retries=0,
        )
        self._clock = clock
        self._lock = threading.Lock()
        self._token: Optional[AccessToken] = (
            self._wrap(initial_token) if initial_token else None
        )

    # -------------------------------------------------
    # Public methods
    # -------------------------------------------------
    @property
    def current_token(self) -> Optional[str]:
        token = self._token
        return token.value if token else None

    def clear(self) -> None:
        with self._lock:
            self._token = None

    def get_valid_token(self) -> str:
        """
        Return the cached token if it is still good for longer than the
        safety margin, otherwise log in and cache the new one.
        """
        with self._lock:
            token = self._token
            now = datetime.fromtimestamp(self._clock(), tz=timezone.utc)
            if token is not None and not token.expires_within(self.EXPIRY_MARGIN_SECONDS, now):
                logger.debug(f"Reusing cached ShipPrimus token (expires {token.expires_at})")
                return token.value

            logger.info(f"Logging in to ShipPrimus as {self.config.username}")
            try:
                body = self.http.post_json(
                    self.LOGIN_ENDPOINT,
                    payload={
                        "username": self.config.username,
                        "password": self.config.password,
                    },
                )
            except TransportError as e:
                raise AuthError("Could not obtain token from auth endpoint") from e

            value = first_present(body, ACCESS_TOKEN_RULES, present=is_nonempty_text)
            if not value:
                raise AuthError("Login response did not contain an access token")

            self._token = self._wrap(value)
            return self._token.value

    def refresh_token(self, old_token: str) -> str:
        """Exchange ``old_token`` for a new one; always hits the network."""
        with self._lock:
            logger.info("Refreshing ShipPrimus token")
            try:
                body = self.http.post_json(
                    self.REFRESH_ENDPOINT,
                    payload={"token": old_token},
                )
            except TransportError as e:
                raise AuthError("Could not refresh token") from e

            value = first_present(body, REFRESHED_TOKEN_RULES, present=is_nonempty_text)
            if not value:
                raise AuthError("Could not refresh token")

            self._token = self._wrap(value)
            return self._token.value

    # -------------------------------------------------
    # Helpers
    # -------------------------------------------------
    @classmethod
    def _wrap(cls, value: str) -> AccessToken:
        return AccessToken(value=value, expires_at=cls.decode_expiry(value))

    @staticmethod
    def decode_expiry(token: str) -> Optional[datetime]:
        """
        Read the ``exp`` claim from a JWT-shaped token without verifying it.

        Never raises: anything that is not ``<x>.<base64url JSON object>``
        with a numeric ``exp`` yields None, which callers treat as expired.
        """
        parts = token.split(".")
        if len(parts) < 2:
            return None

        payload = parts[1]
        payload += "=" * (-len(payload) % 4)
        try:
            claims = json.loads(base64.urlsafe_b64decode(payload).decode("utf-8"))
        except (binascii.Error, UnicodeDecodeError, ValueError):
            return None

        if not isinstance(claims, dict):
            return None

        exp = claims.get("exp")
        if isinstance(exp, bool) or not isinstance(exp, (int, float)):
            return None

        try:
            return AccessToken.expiry_from_claim(exp)
        except (OverflowError, OSError, ValueError):
            return None
