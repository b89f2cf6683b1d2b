"""
Number parsing shared by provider extraction and metric normalization.
"""

from __future__ import annotations

import math
from typing import Any


def parse_number(value: Any) -> float | None:
    """
    float for ints, floats and numeric strings ("1,500,000" and " 12.5 " included).

    None for bools, other types, unparsable strings, NaN, infinities and
    ints too large for a float.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        if isinstance(value, (int, float)):
            out = float(value)
        elif isinstance(value, str):
            out = float(value.strip().replace(",", ""))
        else:
            return None
    except (ValueError, OverflowError):
        return None
    if math.isnan(out) or math.isinf(out):
        return None
    return out
