"""
Optical Power Helpers

Numeric building blocks shared by the prescription validator and the
contact lens converter:
- Quarter-diopter checks and rounding
- Signed, zero-padded power formatting ("+05.50", "-00.75")
- Spherical equivalent and vertex distance compensation

Floating-point checks are done on scaled integers and decimal rounding is
done on the exact binary value, so results do not depend on banker's rounding.
"""

import math
from decimal import Decimal, ROUND_HALF_UP, localcontext
from typing import Any, Dict, Mapping, Optional


def to_number(value: Any) -> Optional[float]:
    """
    Normalise a number or numeric string into a finite float.

    Args:
        value: int, float or numeric string (surrounding whitespace allowed)

    Returns:
        The float value, or None when the value is absent, blank,
        non-numeric or not finite.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        num = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if not math.isfinite(num):
        return None
    return num


def round_half_away(value: float, places: int = 0) -> float:
    """Round to `places` decimals, ties away from zero."""
    if not math.isfinite(value):
        return value
    quantum = Decimal(1).scaleb(-places)
    # Largest finite double has 309 integer digits
    with localcontext() as ctx:
        ctx.prec = 330 + max(places, 0)
        return float(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))


def is_multiple_of_quarter(value: float) -> bool:
    """True if value is an exact multiple of 0.25 D (checked in hundredths)."""
    scaled = value * 100
    if not math.isfinite(scaled):
        return False
    return int(round_half_away(scaled)) % 25 == 0


def format_power(value: float) -> str:
    """
    Format a power as sign + zero-padded two-decimal magnitude.

    Zero is rendered with a plus sign: 0 -> "+00.00", -0.5 -> "-00.50",
    12 -> "+12.00".
    """
    sign = "-" if value < 0 else "+"
    fixed = f"{round_half_away(abs(value), 2):.2f}"
    return f"{sign}{fixed.rjust(5, '0')}"


def round_to_nearest_quarter(value: float) -> float:
    return round_half_away(value * 4) / 4


def format_if_quarter(value: float) -> str:
    """Formatted power if value is a quarter multiple, otherwise an empty string."""
    if is_multiple_of_quarter(value):
        return format_power(value)
    return ""


def format_result_to_quarter(values: Mapping[str, float]) -> Dict[str, str]:
    return {key: format_if_quarter(val) for key, val in values.items()}


def spherical_equivalent(sphere: float, cylinder: float) -> float:
    """SE = sphere + cylinder / 2, rounded to 0.01 D."""
    return round_half_away(sphere + cylinder / 2, 2)


def vertex_compensate(power: float, vertex_distance_mm: float) -> float:
    """Convert spectacle-plane power to its corneal-plane (contact lens) equivalent.
    Dc = Ds / (1 − d·Ds), d in metres.
    Example: −8.00 D at 12 mm → Dc ≈ −7.30 D.
    """
    d = float(vertex_distance_mm) / 1000.0
    denom = 1.0 - d * float(power)
    if abs(denom) < 1e-8:
        return float("inf") if power > 0 else float("-inf")
    return float(power) / denom
