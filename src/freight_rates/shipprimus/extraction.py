"""
Ordered extraction rules for provider payloads.

ShipPrimus is not consistent about where it puts things: a login token may
sit at the top level or under ``data``, a carrier may be called ``name`` or
``carrier``. Each field gets an ordered tuple of key paths; the first path
that resolves to a present value wins (non-null by default; token rules
also skip empty strings). Supporting a new shape means adding
a path here.
"""

from __future__ import annotations

from typing import Any, Callable, Mapping, Sequence, Tuple

KeyPath = Tuple[str, ...]


ACCESS_TOKEN_RULES: Sequence[KeyPath] = (("accessToken",), ("data", "accessToken"))
REFRESHED_TOKEN_RULES: Sequence[KeyPath] = (("token",), ("data", "token"))
RESULTS_RULES: Sequence[KeyPath] = (("data", "results"), ("results",))

CARRIER_RULES: Sequence[KeyPath] = (("name",), ("carrier",))
SERVICE_LEVEL_RULES: Sequence[KeyPath] = (("serviceLevel",),)
RATE_TYPE_RULES: Sequence[KeyPath] = (("rateType",),)
TOTAL_RULES: Sequence[KeyPath] = (("total",),)
TRANSIT_RULES: Sequence[KeyPath] = (("transitDays",),)


def resolve(record: Any, path: KeyPath) -> Any:
    """Follow ``path`` through nested mappings; None if any hop is missing."""
    current = record
    for key in path:
        if not isinstance(current, Mapping):
            return None
        current = current.get(key)
        if current is None:
            return None
    return current


def is_not_null(value: Any) -> bool:
    return value is not None


def is_nonempty_text(value: Any) -> bool:
    """Tokens: an empty or blank string counts as absent, so the next rule is tried."""
    return isinstance(value, str) and value.strip() != ""


def first_present(
    record: Any,
    rules: Sequence[KeyPath],
    default: Any = None,
    present: Callable[[Any], bool] = is_not_null,
) -> Any:
    for path in rules:
        value = resolve(record, path)
        if present(value):
            return value
    return default
