from __future__ import annotations

import math
import re
from typing import Any

# "m:ss" .. "mmmm:ss"; seconds 0-59 with an optional leading digit.
_DURATION_RE = re.compile(r"^([0-9]{1,4})\s*:\s*([0-5]?[0-9])$")


def parse_call_duration_seconds(value: Any) -> int | None:
    """Convert an operator-entered call duration to canonical seconds.

    Accepts a non-negative finite number (floored) or a ``"minutes:seconds"``
    string such as ``"7:30"``. Returns None for anything else.
    """

    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            # Integers past the float range count as infinite.
            return None
        if not math.isfinite(number) or number < 0:
            return None
        return math.floor(value)
    if not isinstance(value, str):
        return None

    s = value.strip()
    if not s:
        return None

    m = _DURATION_RE.match(s)
    if m is None:
        return None
    minutes = int(m.group(1))
    seconds = int(m.group(2))
    return minutes * 60 + seconds


def format_call_duration(seconds: int) -> str:
    """Render canonical seconds as ``"M:SS"``."""

    if seconds < 0:
        raise ValueError("call duration must be >= 0")
    minutes, rest = divmod(int(seconds), 60)
    return f"{minutes}:{rest:02d}"
