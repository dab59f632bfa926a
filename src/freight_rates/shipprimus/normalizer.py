from __future__ import annotations

from typing import Any, Dict, Hashable, Iterable, List, Mapping

from .extraction import (
    CARRIER_RULES,
    RATE_TYPE_RULES,
    SERVICE_LEVEL_RULES,
    TOTAL_RULES,
    TRANSIT_RULES,
    first_present,
)
from .schema import NormalizedRate


UNKNOWN_CARRIER = "UNKNOWN"

# Group key for rows without a service level; cannot equal any string level.
_UNKNOWN_SERVICE_LEVEL = object()


def normalize_rate(raw: Mapping[str, Any]) -> NormalizedRate:
    """
    Map one raw ShipPrimus rate entry onto the fixed UI shape.

    Missing totals and transit days stay None (never zero) so an absent
    quote cannot be mistaken for a free one.
    """
    return NormalizedRate(
        carrier=first_present(raw, CARRIER_RULES, UNKNOWN_CARRIER),
        service_level=first_present(raw, SERVICE_LEVEL_RULES, ""),
        rate_type=first_present(raw, RATE_TYPE_RULES, ""),
        total=first_present(raw, TOTAL_RULES),
        transit_time=first_present(raw, TRANSIT_RULES),
    )


def normalize_rates(raw_rates: Iterable[Mapping[str, Any]]) -> List[NormalizedRate]:
    return [normalize_rate(raw) for raw in raw_rates]


def _is_cheaper(candidate: NormalizedRate, current: NormalizedRate) -> bool:
    """
    Strict less-than on totals. A null total never beats anything, and any
    concrete total beats a null one.
    """
    if candidate.total is None:
        return False
    if current.total is None:
        return True
    return candidate.total < current.total


def cheapest_per_service_level(rows: Iterable[NormalizedRate]) -> List[NormalizedRate]:
    """
    Keep the cheapest row of each service level, groups in first-seen order.

    Ties keep the earlier row.
    """
    groups: Dict[Hashable, NormalizedRate] = {}
    for row in rows:
        key = row.service_level or _UNKNOWN_SERVICE_LEVEL
        current = groups.get(key)
        if current is None or _is_cheaper(row, current):
            groups[key] = row
    return list(groups.values())
