"""
QuickQuote - Derived Totals

Applies markups, material extras, overhead, discount and tax to an
engine estimate. Every intermediate amount is rounded to cents before
it feeds the next step.
"""

import math
import uuid
from dataclasses import dataclass, field, asdict
from typing import Dict, List, Optional

from .estimator import EstimateResult, round2, round_half_up

CONFIDENCE_BANDS = {
    "Low": 0.20,
    "High": 0.10,
}
DEFAULT_CONFIDENCE_BAND = 0.15


def make_id() -> str:
    return str(uuid.uuid4())


@dataclass
class MaterialExtra:
    """An extra material line added on top of the per-area material cost."""
    name: str
    cost: float = 0.0
    id: str = field(default_factory=make_id)
    entry_id: str = field(default_factory=make_id)

    def to_dict(self) -> Dict[str, object]:
        return {"entryId": self.entry_id, "id": self.id, "name": self.name, "cost": self.cost}


@dataclass
class AdjustmentParameters:
    """User-chosen percentages; independent of each other and not capped at 100."""
    labor_markup_pct: float = 15.0
    material_markup_pct: float = 10.0
    overhead_pct: float = 10.0
    discount_pct: float = 0.0
    tax_pct: float = 0.0
    material_extras: List[MaterialExtra] = field(default_factory=list)


@dataclass(frozen=True)
class DerivedTotals:
    """Final payable amount and its breakdown."""
    labor_base: float
    material_base: float
    material_extras_total: float
    adjusted_material: float
    markup_labor: float
    markup_material: float
    subtotal: float
    overhead_amt: float
    sub_with_overhead: float
    discount_amt: float
    tax_base: float
    tax_amt: float
    grand_total: float
    base_cost: float
    markup_delta: float
    confidence_band: float
    range_low: float
    range_high: float

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


def _cost(value) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def confidence_band(quality_tier: Optional[str]) -> float:
    """Relative uncertainty of an estimate for a quality tier."""
    return CONFIDENCE_BANDS.get(quality_tier, DEFAULT_CONFIDENCE_BAND)


def derive_totals(
    estimate: EstimateResult,
    adjustments: AdjustmentParameters,
    quality_tier: Optional[str] = "Medium"
) -> DerivedTotals:
    """
    Compose an estimate with markups, overhead, discount and tax.

    Args:
        estimate: Engine output
        adjustments: Markup/overhead/discount/tax percentages and extras
        quality_tier: Selects the confidence band for the range

    Returns:
        DerivedTotals
    """
    labor = estimate.labor
    material = estimate.material

    material_extras_total = round2(sum(_cost(extra.cost) for extra in adjustments.material_extras))
    adjusted_material = round2(material + material_extras_total)
    markup_labor = round2(labor * (1 + adjustments.labor_markup_pct / 100))
    markup_material = round2(adjusted_material * (1 + adjustments.material_markup_pct / 100))
    subtotal = round2(markup_labor + markup_material)
    overhead_amt = round2(subtotal * (adjustments.overhead_pct / 100))
    sub_with_overhead = round2(subtotal + overhead_amt)
    discount_amt = round2(sub_with_overhead * (adjustments.discount_pct / 100))
    tax_base = round2(sub_with_overhead - discount_amt)
    tax_amt = round2(tax_base * (adjustments.tax_pct / 100))
    grand_total = round2(tax_base + tax_amt)

    base_cost = round2(labor + adjusted_material)
    markup_delta = round2(subtotal - base_cost)

    band = confidence_band(quality_tier)
    range_low = round2(grand_total * (1 - band))
    range_high = round2(grand_total * (1 + band))

    return DerivedTotals(
        labor_base=labor,
        material_base=material,
        material_extras_total=material_extras_total,
        adjusted_material=adjusted_material,
        markup_labor=markup_labor,
        markup_material=markup_material,
        subtotal=subtotal,
        overhead_amt=overhead_amt,
        sub_with_overhead=sub_with_overhead,
        discount_amt=discount_amt,
        tax_base=tax_base,
        tax_amt=tax_amt,
        grand_total=grand_total,
        base_cost=base_cost,
        markup_delta=markup_delta,
        confidence_band=band,
        range_low=range_low,
        range_high=range_high
    )


def breakdown_shares(labor: float, material: float, overhead: float = 0.0) -> Dict[str, int]:
    """
    Whole-number percentage share of each cost slice.

    The overhead slice is only included when it is positive.
    """
    total = max(labor + material + overhead, 0.0001)
    slices = {"Labor": labor, "Material": material}
    if overhead > 0:
        slices["Overhead"] = overhead
    return {title: int(round_half_up(value / total * 100)) for title, value in slices.items()}
