"""
QuickQuote - Input Normalizer

Sanitizes free-text numeric input before it reaches the estimator.
"""

import math
import re
from typing import Any, Mapping, Optional

from .estimator import round2

SQFT_PER_SQM = 10.7639

_NOT_NUMERIC = re.compile(r"[^\d.]")
_FLOAT_PREFIX = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def _unwrap(raw: Any) -> Any:
    """Pull the value out of an event-like wrapper, or return raw as-is."""
    target = getattr(raw, "target", None)
    if target is not None and getattr(target, "value", None) is not None:
        return target.value
    if isinstance(raw, Mapping):
        target = raw.get("target")
        if isinstance(target, Mapping) and target.get("value") is not None:
            return target["value"]
    return raw


def clamp(raw: Any, minimum: float = -math.inf, maximum: float = math.inf) -> float:
    """
    Sanitize and clamp a numeric input.

    Numbers are clamped as they are. In text, every character other
    than digits and '.' is stripped first. Empty text counts as 0.
    Text that still does not parse, and any non-finite number, becomes
    ``minimum``.

    Args:
        raw: Raw value (string or number) or an event-like wrapper
        minimum: Lower bound (inclusive)
        maximum: Upper bound (inclusive)

    Returns:
        Number within [minimum, maximum]
    """
    value = _unwrap(raw)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            number = float(value)
        except OverflowError:
            return minimum
        if not math.isfinite(number):
            return minimum
        return max(minimum, min(number, maximum))

    cleaned = _NOT_NUMERIC.sub("", value if isinstance(value, str) else "")

    if cleaned == "":
        number = 0.0
    else:
        try:
            number = float(cleaned)
        except ValueError:
            return minimum

    if not math.isfinite(number):
        return minimum
    return max(minimum, min(number, maximum))


def to_square_feet(size: float, unit: str = "sqft") -> float:
    """Convert a room size to square feet."""
    if unit == "sqft":
        return float(size)
    if unit == "sqm":
        return float(size) * SQFT_PER_SQM
    raise ValueError(f"Unknown unit: {unit!r}")


def parse_float(text: Any) -> float:
    """
    Parse the leading number out of free text ("12.5 each" -> 12.5).

    Returns nan when no number prefix is found.
    """
    if isinstance(text, (int, float)):
        return float(text)
    match = _FLOAT_PREFIX.match(str(text)) if text is not None else None
    if not match:
        return math.nan
    return float(match.group(1))


def coerce_percent(value: Any) -> Optional[float]:
    """Round a restored percentage, or None when it is not a finite number."""
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return round2(number)
