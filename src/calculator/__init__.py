from .rates import RateTable, RateTableError, ProjectRate, FlatLocation, RichLocation, LocationEntry, DEFAULT_RATE_TABLE, load_rate_table
from .estimator import compute_estimate, safe_estimate, compare_quality_tiers, round2, EstimateResult, EstimateError, InvalidAreaError, UnknownProjectTypeError
from .normalizer import clamp, to_square_feet, parse_float, coerce_percent
from .formatting import CurrencyFormatter, make_formatter, format_range
from .totals import AdjustmentParameters, MaterialExtra, DerivedTotals, derive_totals, confidence_band, breakdown_shares
from .quote import QuoteInputs, ClientSnapshot, Quote, build_quote
