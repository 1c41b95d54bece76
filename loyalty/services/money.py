"""Points arithmetic helpers.

Centralized so base points, tier bonus and any future earning rule use
identical decimal conversion and truncation semantics.
"""

from __future__ import annotations
from decimal import Decimal, ROUND_DOWN
from typing import Union


def to_decimal(value: Union[int, float, Decimal]) -> Decimal:
    # str() round-trip keeps 3.67 as 3.67 rather than its binary expansion
    return value if isinstance(value, Decimal) else Decimal(str(value))


def truncate_points(value: Union[int, float, Decimal]) -> int:
    return int(to_decimal(value).to_integral_value(rounding=ROUND_DOWN))
