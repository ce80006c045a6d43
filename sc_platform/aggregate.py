# sc_platform/aggregate.py
# Showcase - average/count over the ratings of one item
# Copyright (c) 2025-2026 Showcase
from __future__ import annotations

from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal
from fractions import Fraction
from typing import Any

from .models import AggregateRating

_ONE_PLACE = Decimal("0.1")


def _value_of(r: Any) -> int:
    if isinstance(r, int) and not isinstance(r, bool):
        return r
    return int(getattr(r, "value"))


def round_one_place(x: Fraction | float | int) -> float:
    """Half away from zero to one decimal place."""
    if isinstance(x, Fraction):
        d = Decimal(x.numerator) / Decimal(x.denominator)
    else:
        d = Decimal(str(x))
    return float(d.quantize(_ONE_PLACE, rounding=ROUND_HALF_UP))


def compute_aggregate(ratings: Iterable[Any]) -> AggregateRating:
    """Accepts Rating records or bare int values. Nothing is cached between calls."""
    values = [_value_of(r) for r in ratings]
    count = len(values)
    if count == 0:
        return AggregateRating(average=0.0, count=0)
    return AggregateRating(average=round_one_place(Fraction(sum(values), count)), count=count)


__all__ = ["compute_aggregate", "round_one_place"]
