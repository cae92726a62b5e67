"""Price-string parsing and cost tiers.

Event prices arrive as free text: ``"Free"``, ``"$0"``, ``"$15"`` or a range
such as ``"$10-$25"``. A range always counts at its maximum, never its
midpoint or minimum.
"""
from __future__ import annotations

import re
from typing import Iterable, List

BUDGET_LIMIT = 25

_FREE_VALUES = {"free", "$0"}
_INT_RE = re.compile(r"\d+")
# CPython's default int-from-string digit limit.
_MAX_PRICE_DIGITS = 4300


def extract_prices(price_range: str) -> List[int]:
    """Every integer embedded in ``price_range``, in order of appearance.

    Digit runs too long for ``int()`` are treated as unparseable and dropped.
    """
    prices: List[int] = []
    for token in _INT_RE.findall(price_range or ""):
        if len(token) > _MAX_PRICE_DIGITS:
            continue
        try:
            prices.append(int(token))
        except ValueError:
            continue
    return prices


def is_free(price_range: str) -> bool:
    return (price_range or "").lower() in _FREE_VALUES


def max_price(price_range: str) -> int:
    """Cost contribution of one activity; free and digitless strings count as 0."""
    if is_free(price_range):
        return 0
    prices = extract_prices(price_range)
    return max(prices) if prices else 0


def is_budget(price_range: str, limit: int = BUDGET_LIMIT) -> bool:
    if is_free(price_range):
        return True
    prices = extract_prices(price_range)
    return bool(prices) and max(prices) <= limit


def estimate_cost_tier(price_ranges: Iterable[str]) -> str:
    """Cost label for a generated itinerary."""
    total = 0
    all_free = True
    for price_range in price_ranges:
        if is_free(price_range):
            continue
        all_free = False
        total += max_price(price_range)

    if all_free:
        return "Free"
    if total <= 25:
        return "Under $25"
    if total <= 50:
        return "Under $50"
    if total <= 100:
        return "Under $100"
    return f"Around ${total}"


def estimate_saved_plan_cost(price_ranges: Iterable[str]) -> str:
    """Cost label for a hand-picked plan.

    Coarser than :func:`estimate_cost_tier`: a zero total reads as free and
    there is no ``"Under $25"`` band.
    """
    total = sum(max_price(price_range) for price_range in price_ranges)
    if total == 0:
        return "Free"
    if total <= 50:
        return "Under $50"
    if total <= 100:
        return "Under $100"
    return f"Around ${total}"
