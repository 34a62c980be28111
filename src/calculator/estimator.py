"""
QuickQuote - Estimate Engine

Turns a room size, project type, quality tier and location into a
rounded labor/material/total breakdown using the static rate table.
"""

import math
import sys
from dataclasses import dataclass, asdict
from typing import Dict, Optional, Tuple

from .rates import DEFAULT_CURRENCY, DEFAULT_RATE_TABLE, RateTable, RichLocation

EPSILON = sys.float_info.epsilon


def round_half_up(value: float) -> float:
    # ties go toward +infinity
    floor = math.floor(value)
    return floor + 1 if value - floor >= 0.5 else floor


def round2(value) -> float:
    """
    Round to 2 decimal places, half-up, with an epsilon nudge for
    binary representation error (1.005 rounds to 1.01).

    Non-numeric and non-finite values round to 0.0. Values too large to
    scale to cents carry no fraction and are returned unchanged.
    """
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return 0.0
    if not math.isfinite(number):
        return 0.0
    cents = (number + EPSILON) * 100
    if not math.isfinite(cents):
        return number
    return round_half_up(cents) / 100


class EstimateError(ValueError):
    """Base class for estimate input validation failures."""
    kind = "EstimateError"
    default_message = "Invalid inputs"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class InvalidAreaError(EstimateError):
    kind = "InvalidArea"
    default_message = "Invalid room size"


class UnknownProjectTypeError(EstimateError):
    kind = "UnknownProjectType"
    default_message = "Unknown project type"


@dataclass(frozen=True)
class EstimateResult:
    """Rounded cost breakdown for a single room."""
    labor: float
    material: float
    total: float
    currency_code: str = DEFAULT_CURRENCY

    def to_dict(self) -> Dict[str, object]:
        record = asdict(self)
        record["currency"] = record.pop("currency_code")
        return record


ZERO_ESTIMATE = EstimateResult(labor=0.0, material=0.0, total=0.0, currency_code=DEFAULT_CURRENCY)


def compute_estimate(
    area,
    project_type: str,
    quality_tier: str,
    location_name: str,
    rate_table: Optional[RateTable] = None
) -> EstimateResult:
    """
    Calculate the cost estimate for a room.

    Unknown quality tiers and locations fall back to a multiplier of 1
    (and USD); an unknown project type is an error.

    Args:
        area: Room size in square feet
        project_type: Key into the rate table's projects
        quality_tier: Key into the quality multipliers
        location_name: Key into the location multipliers
        rate_table: Rate table to use (built-in table if None)

    Returns:
        EstimateResult

    Raises:
        InvalidAreaError: area is not a finite number greater than zero
        UnknownProjectTypeError: project type is not in the rate table
    """
    table = rate_table or DEFAULT_RATE_TABLE

    try:
        size = float(area)
    except (TypeError, ValueError, OverflowError):
        raise InvalidAreaError()
    if not math.isfinite(size) or size <= 0:
        raise InvalidAreaError()

    project = table.get_project(project_type)
    if project is None:
        raise UnknownProjectTypeError()

    quality_multiplier = table.get_quality_multiplier(quality_tier)

    location = table.get_location(location_name)
    location_multiplier = location.multiplier if location is not None else 1.0
    currency_code = location.currency_code if isinstance(location, RichLocation) else DEFAULT_CURRENCY

    labor_base = project.labor_per_area * size
    material_base = project.material_per_area * size

    labor = round2(labor_base * quality_multiplier * location_multiplier)
    material = round2(material_base * quality_multiplier * location_multiplier)
    # Sum of the already-rounded parts, rounded again
    total = round2(labor + material)

    return EstimateResult(
        labor=labor,
        material=material,
        total=total,
        currency_code=currency_code
    )


def safe_estimate(
    area,
    project_type: str,
    quality_tier: str,
    location_name: str,
    rate_table: Optional[RateTable] = None
) -> Tuple[EstimateResult, str]:
    """
    Like compute_estimate, but never raises.

    Returns:
        (EstimateResult, error message). On failure the result is all
        zeros in USD and the message describes the problem; on success
        the message is empty.
    """
    try:
        return compute_estimate(area, project_type, quality_tier, location_name, rate_table), ""
    except EstimateError as e:
        return ZERO_ESTIMATE, e.message or EstimateError.default_message


def compare_quality_tiers(
    area,
    project_type: str,
    location_name: str,
    rate_table: Optional[RateTable] = None
) -> Dict[str, float]:
    """
    Compare engine totals across every configured quality tier.

    Returns:
        Dictionary mapping tier name to total estimate
    """
    table = rate_table or DEFAULT_RATE_TABLE
    results = {}

    for tier in table.quality_tiers:
        estimate = compute_estimate(area, project_type, tier, location_name, table)
        results[tier] = estimate.total

    return results
