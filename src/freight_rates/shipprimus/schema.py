from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class AccessToken(BaseModel):
    """A bearer token plus the expiry decoded from its claims (if any)."""

    model_config = ConfigDict(frozen=True)

    value: str = Field(..., repr=False, description="Opaque bearer string")
    expires_at: Optional[datetime] = Field(
        None, description="UTC expiry from the `exp` claim; None if not decodable"
    )

    def expires_within(self, margin_seconds: float, now: datetime) -> bool:
        """True when the expiry is unknown or not strictly after now + margin."""
        if self.expires_at is None:
            return True
        return self.expires_at <= now + timedelta(seconds=margin_seconds)

    @staticmethod
    def expiry_from_claim(exp: float) -> datetime:
        return datetime.fromtimestamp(exp, tz=timezone.utc)


class NormalizedRate(BaseModel):
    """
    UI-ready rate row. Serialized with the column labels the rate table
    expects (``CARRIER``, ``SERVICE LEVEL``...) via ``by_alias=True``.
    """

    model_config = ConfigDict(populate_by_name=True)

    carrier: str = Field("UNKNOWN", alias="CARRIER")
    service_level: str = Field("", alias="SERVICE LEVEL")
    rate_type: str = Field("", alias="RATE TYPE")
    total: Optional[float] = Field(None, alias="TOTAL")
    transit_time: Optional[int] = Field(None, alias="TRANSIT TIME")

    # ------------------------------
    # Field Validators (Pydantic v2)
    # ------------------------------

    @field_validator("carrier", "service_level", "rate_type", mode="before")
    @classmethod
    def validate_text_fields(cls, v):
        return "" if v is None else str(v)

    @field_validator("total", mode="before")
    @classmethod
    def validate_total(cls, v):
        return _to_float(v)

    @field_validator("transit_time", mode="before")
    @classmethod
    def validate_transit_time(cls, v):
        number = _to_float(v)
        return None if number is None else int(number)

    def to_row(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class RateQuote(BaseModel):
    """All normalized rows plus the cheapest row per service level."""

    data: List[NormalizedRate] = Field(default_factory=list)
    cheapest: List[NormalizedRate] = Field(default_factory=list)

    def to_payload(self) -> Dict[str, List[Dict[str, Any]]]:
        return {
            "data": [row.to_row() for row in self.data],
            "cheapest": [row.to_row() for row in self.cheapest],
        }


def _to_float(v: Any) -> Optional[float]:
    if v is None or isinstance(v, bool):
        return None
    try:
        if isinstance(v, str):
            v = v.replace("$", "").replace(",", "").strip()
        number = float(v)
    except (ValueError, TypeError):
        return None
    # NaN/inf cannot be ranked or cast to int
    return number if math.isfinite(number) else None
