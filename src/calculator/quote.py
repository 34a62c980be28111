"""
QuickQuote - Quote Assembly

Bundles the form inputs of a quote, restores them from saved records
and runs them through the estimator, totals and formatter.
"""

import math
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Mapping, Optional

from .estimator import EstimateResult, round2, safe_estimate
from .formatting import DEFAULT_LOCALE, CurrencyFormatter, format_range, make_formatter
from .normalizer import coerce_percent, to_square_feet
from .rates import DEFAULT_RATE_TABLE, RateTable
from .totals import AdjustmentParameters, DerivedTotals, MaterialExtra, derive_totals, make_id

ROLES = ["Homeowner", "Contractor"]
UNITS = ["sqft", "sqm"]
AUTO_CURRENCY = "Auto"

# Percentage fields as (attribute, saved record key)
PERCENT_FIELDS = [
    ("overhead_pct", "overheadPct"),
    ("tax_pct", "taxPct"),
    ("discount_pct", "discountPct"),
    ("labor_markup_pct", "laborMarkupPct"),
    ("material_markup_pct", "materialMarkupPct"),
]


@dataclass
class ClientSnapshot:
    """Client contact details printed on the exported quote."""
    name: str = ""
    company: str = ""
    email: str = ""
    phone: str = ""
    notes: str = ""

    def trimmed(self) -> "ClientSnapshot":
        return ClientSnapshot(
            name=self.name.strip(),
            company=self.company.strip(),
            email=self.email.strip(),
            phone=self.phone.strip(),
            notes=self.notes.strip(),
        )

    def to_dict(self) -> Dict[str, str]:
        return {
            "name": self.name,
            "company": self.company,
            "email": self.email,
            "phone": self.phone,
            "notes": self.notes,
        }


@dataclass
class QuoteInputs:
    """Everything the user picks on the estimate form."""
    role: str = "Homeowner"
    project_type: str = ""
    quality: str = "Medium"
    location: str = ""
    unit: str = "sqft"
    size: float = 100.0
    currency_mode: str = AUTO_CURRENCY
    overhead_pct: float = 10.0
    tax_pct: float = 0.0
    discount_pct: float = 0.0
    labor_markup_pct: float = 15.0
    material_markup_pct: float = 10.0
    material_additions: List[MaterialExtra] = field(default_factory=list)
    client: ClientSnapshot = field(default_factory=ClientSnapshot)

    @classmethod
    def defaults(cls, rate_table: Optional[RateTable] = None, **overrides) -> "QuoteInputs":
        """
        Fresh inputs preselecting the first project and location and the
        second quality tier (the middle tier in the built-in table).
        """
        table = rate_table or DEFAULT_RATE_TABLE
        qualities = table.quality_tiers
        inputs = cls(
            project_type=table.project_names[0],
            quality=qualities[1] if len(qualities) > 1 else "Medium",
            location=table.location_names[0],
        )
        return replace(inputs, **{k: v for k, v in overrides.items() if v is not None})

    @property
    def currency_override(self) -> Optional[str]:
        return None if self.currency_mode == AUTO_CURRENCY else self.currency_mode

    @property
    def adjustments(self) -> AdjustmentParameters:
        return AdjustmentParameters(
            labor_markup_pct=self.labor_markup_pct,
            material_markup_pct=self.material_markup_pct,
            overhead_pct=self.overhead_pct,
            discount_pct=self.discount_pct,
            tax_pct=self.tax_pct,
            material_extras=list(self.material_additions),
        )

    def apply_record(self, record: Mapping[str, Any], rate_table: Optional[RateTable] = None) -> "QuoteInputs":
        """
        Restore a saved draft or history entry on top of these inputs.

        Only values that are still valid are taken: known options,
        finite numbers (rounded to cents) and 3-letter currency codes.
        Anything else keeps its current value.

        Returns:
            New QuoteInputs
        """
        if not isinstance(record, Mapping):
            return replace(self)

        table = rate_table or DEFAULT_RATE_TABLE
        changes: Dict[str, Any] = {}

        if _option(record.get("role"), ROLES):
            changes["role"] = record["role"]
        if _option(record.get("projectType"), table.projects):
            changes["project_type"] = record["projectType"]
        if _option(record.get("quality"), table.quality_multipliers):
            changes["quality"] = record["quality"]
        if _option(record.get("location"), table.location_multipliers):
            changes["location"] = record["location"]
        if _option(record.get("unit"), UNITS):
            changes["unit"] = record["unit"]

        # drafts store "sizeInput", history entries store "size"
        size = _finite(record.get("sizeInput", record.get("size")))
        if size is not None:
            changes["size"] = size

        currency_mode = record.get("currencyMode", record.get("currency"))
        if isinstance(currency_mode, str) and (currency_mode == AUTO_CURRENCY or len(currency_mode) == 3):
            changes["currency_mode"] = currency_mode

        for attr, key in PERCENT_FIELDS:
            value = coerce_percent(record.get(key))
            if value is not None:
                changes[attr] = value

        additions = record.get("materialAdditions")
        if isinstance(additions, list):
            changes["material_additions"] = [
                MaterialExtra(
                    name=item["name"],
                    cost=round2(item.get("cost")),
                    id=item.get("id") or make_id(),
                    entry_id=item.get("entryId") or make_id(),
                )
                for item in additions
                if isinstance(item, Mapping) and item.get("name")
            ]

        client = record.get("client")
        if isinstance(client, Mapping):
            changes["client"] = ClientSnapshot(
                name=str(client.get("name") or ""),
                company=str(client.get("company") or ""),
                email=str(client.get("email") or ""),
                phone=str(client.get("phone") or ""),
                notes=str(client.get("notes") or ""),
            )

        return replace(self, **changes)

    def to_draft_record(self, ts: int) -> Dict[str, Any]:
        """Flat record in the saved-draft layout."""
        return {
            "ts": ts,
            "role": self.role,
            "projectType": self.project_type,
            "quality": self.quality,
            "location": self.location,
            "unit": self.unit,
            "sizeInput": self.size,
            "currencyMode": self.currency_mode,
            "overheadPct": self.overhead_pct,
            "taxPct": self.tax_pct,
            "discountPct": self.discount_pct,
            "laborMarkupPct": self.labor_markup_pct,
            "materialMarkupPct": self.material_markup_pct,
            "materialAdditions": [item.to_dict() for item in self.material_additions],
            "client": self.client.to_dict(),
        }

    def to_query_params(self) -> Dict[str, str]:
        """Short keys used in share links."""
        return {
            "r": self.role,
            "p": self.project_type,
            "q": self.quality,
            "l": self.location,
            "u": self.unit,
            "s": _plain_number(self.size),
            "c": self.currency_mode,
            "oh": _plain_number(self.overhead_pct),
            "tax": _plain_number(self.tax_pct),
            "disc": _plain_number(self.discount_pct),
        }

    @classmethod
    def from_query_params(cls, params: Mapping[str, str], rate_table: Optional[RateTable] = None) -> "QuoteInputs":
        """Rebuild inputs from share-link parameters, ignoring invalid ones."""
        record = {
            "role": params.get("r"),
            "projectType": params.get("p"),
            "quality": params.get("q"),
            "location": params.get("l"),
            "unit": params.get("u"),
            "size": params.get("s"),
            "currencyMode": params.get("c"),
            "overheadPct": params.get("oh"),
            "taxPct": params.get("tax"),
            "discountPct": params.get("disc"),
        }
        return cls.defaults(rate_table).apply_record(record, rate_table)


@dataclass
class Quote:
    """A computed quote: estimate, derived totals and a formatter."""
    inputs: QuoteInputs
    area_sqft: float
    estimate: EstimateResult
    totals: DerivedTotals
    currency: str
    formatter: CurrencyFormatter
    error: str = ""

    @property
    def ok(self) -> bool:
        return not self.error

    def formatted(self) -> Dict[str, str]:
        """Display strings for the main amounts."""
        fmt = self.formatter
        return {
            "labor": fmt.format(self.estimate.labor),
            "material": fmt.format(self.estimate.material),
            "total": fmt.format(self.estimate.total),
            "labor_final": fmt.format(self.totals.markup_labor),
            "material_final": fmt.format(self.totals.markup_material),
            "subtotal": fmt.format(self.totals.subtotal),
            "overhead": fmt.format(self.totals.overhead_amt),
            "discount": fmt.format(self.totals.discount_amt),
            "tax": fmt.format(self.totals.tax_amt),
            "grand_total": fmt.format(self.totals.grand_total),
            "range": format_range(fmt, self.totals.range_low, self.totals.range_high),
        }

    def history_entry(self, ts: int) -> Dict[str, Any]:
        """Flat record in the saved-history layout."""
        inputs = self.inputs
        return {
            "ts": ts,
            "role": inputs.role,
            "projectType": inputs.project_type,
            "quality": inputs.quality,
            "location": inputs.location,
            "unit": inputs.unit,
            "size": inputs.size,
            "laborBase": self.estimate.labor,
            "laborFinal": self.totals.markup_labor,
            "materialBase": self.estimate.material,
            "materialExtrasTotal": self.totals.material_extras_total,
            "materialFinal": self.totals.markup_material,
            "total": self.totals.grand_total,
            "baseTotal": self.estimate.total,
            "currency": self.currency,
            "laborMarkupPct": inputs.labor_markup_pct,
            "materialMarkupPct": inputs.material_markup_pct,
            "overheadPct": inputs.overhead_pct,
            "discountPct": inputs.discount_pct,
            "taxPct": inputs.tax_pct,
        }


def build_quote(
    inputs: QuoteInputs,
    rate_table: Optional[RateTable] = None,
    locale: str = DEFAULT_LOCALE
) -> Quote:
    """
    Run quote inputs through the estimator and the totals layer.

    Estimate errors do not raise; they are reported in ``Quote.error``
    with a zero estimate. A currency override only changes how amounts
    are displayed, never the amounts themselves. ``Quote.currency`` is
    the code amounts are rendered in, USD when the requested code cannot
    be formatted.
    """
    table = rate_table or DEFAULT_RATE_TABLE

    try:
        area = to_square_feet(inputs.size, inputs.unit)
    except (TypeError, ValueError):
        area = 0.0

    estimate, error = safe_estimate(area, inputs.project_type, inputs.quality, inputs.location, table)
    formatter = make_formatter(inputs.currency_override or estimate.currency_code, locale)
    totals = derive_totals(estimate, inputs.adjustments, inputs.quality)

    return Quote(
        inputs=inputs,
        area_sqft=area,
        estimate=estimate,
        totals=totals,
        currency=formatter.currency_code,
        formatter=formatter,
        error=error,
    )


def _finite(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _plain_number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


def _option(value: Any, options) -> bool:
    return isinstance(value, str) and value in options
