import math
import re
from typing import Any, Optional

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def parse_positive_int(value: Any) -> Optional[int]:
    """
    Read a duration / section-count form field.

    Leading digits win, the rest is ignored ("30", " 30s", "12.5" -> 30, 30, 12).
    Numbers are truncated (30.5 -> 30). Returns None for anything that is not
    a positive integer, booleans included; callers treat that as "unconstrained".
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        value = int(value)
    if isinstance(value, int):
        return value if value > 0 else None
    if not isinstance(value, str):
        return None
    m = _LEADING_INT.match(value)
    if not m:
        return None
    n = int(m.group(1))
    return n if n > 0 else None
