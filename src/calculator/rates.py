"""
QuickQuote - Rate Table

Static per-area labor/material rates, quality tier multipliers and
location multipliers. The table is loaded once at startup and only
ever read by the estimator.
"""

import json
import logging
import math
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Union

logger = logging.getLogger(__name__)

DEFAULT_CURRENCY = "USD"


class RateTableError(ValueError):
    """Raised when rate configuration is missing or malformed."""


def _positive(value: Any, what: str) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise RateTableError(f"{what} must be a number, got {value!r}")
    if not math.isfinite(number) or number <= 0:
        raise RateTableError(f"{what} must be a positive finite number, got {value!r}")
    return number


@dataclass(frozen=True)
class ProjectRate:
    """Unit costs for one project type, per square foot."""
    labor_per_area: float
    material_per_area: float

    def __post_init__(self):
        _positive(self.labor_per_area, "labor_per_area")
        _positive(self.material_per_area, "material_per_area")


@dataclass(frozen=True)
class FlatLocation:
    """Location given as a bare multiplier. Always priced in USD."""
    multiplier: float

    @property
    def currency_code(self) -> str:
        return DEFAULT_CURRENCY


@dataclass(frozen=True)
class RichLocation:
    """Location with its own multiplier and currency code."""
    multiplier: float
    currency_code: str = DEFAULT_CURRENCY


LocationEntry = Union[FlatLocation, RichLocation]


class RateTable:
    """
    Read-only lookup of project rates and multipliers.

    Maps are exposed as mapping proxies so nothing downstream can
    mutate the configuration.
    """

    def __init__(
        self,
        projects: Mapping[str, ProjectRate],
        quality_multipliers: Mapping[str, float],
        location_multipliers: Mapping[str, LocationEntry],
    ):
        if not projects:
            raise RateTableError("rate table needs at least one project")
        if not quality_multipliers:
            raise RateTableError("rate table needs at least one quality tier")
        if not location_multipliers:
            raise RateTableError("rate table needs at least one location")

        qualities = {}
        for tier, multiplier in quality_multipliers.items():
            qualities[tier] = _positive(multiplier, f"quality multiplier {tier!r}")

        locations: Dict[str, LocationEntry] = {}
        for name, entry in location_multipliers.items():
            if not isinstance(entry, (FlatLocation, RichLocation)):
                raise RateTableError(f"location {name!r} is not a location entry")
            _positive(entry.multiplier, f"location multiplier {name!r}")
            locations[name] = entry

        for name, project in projects.items():
            if not isinstance(project, ProjectRate):
                raise RateTableError(f"project {name!r} is not a ProjectRate")

        self.projects = MappingProxyType(dict(projects))
        self.quality_multipliers = MappingProxyType(qualities)
        self.location_multipliers = MappingProxyType(locations)

    @property
    def project_names(self) -> List[str]:
        return list(self.projects)

    @property
    def quality_tiers(self) -> List[str]:
        return list(self.quality_multipliers)

    @property
    def location_names(self) -> List[str]:
        return list(self.location_multipliers)

    def get_project(self, project_type: str) -> Optional[ProjectRate]:
        """Get the rates for a project type, or None when it is not listed."""
        return self.projects.get(project_type)

    def get_quality_multiplier(self, quality_tier: str) -> float:
        """Unknown tiers are neutral."""
        return self.quality_multipliers.get(quality_tier, 1.0)

    def get_location(self, location_name: str) -> Optional[LocationEntry]:
        return self.location_multipliers.get(location_name)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RateTable":
        """
        Build a rate table from JSON-shaped configuration.

        Args:
            data: Mapping with ``projects``, ``qualityMultipliers`` and
                ``locationMultipliers`` keys

        Returns:
            RateTable
        """
        if not isinstance(data, Mapping):
            raise RateTableError("rate configuration must be an object")

        projects = {}
        for name, raw in (data.get("projects") or {}).items():
            if not isinstance(raw, Mapping):
                raise RateTableError(f"project {name!r} must be an object")
            labor = raw.get("laborPerArea", raw.get("laborPerSqFt"))
            material = raw.get("materialPerArea", raw.get("materialPerSqFt"))
            projects[name] = ProjectRate(
                labor_per_area=_positive(labor, f"labor rate for {name!r}"),
                material_per_area=_positive(material, f"material rate for {name!r}"),
            )

        locations: Dict[str, LocationEntry] = {}
        for name, raw in (data.get("locationMultipliers") or {}).items():
            if isinstance(raw, Mapping):
                multiplier = raw.get("multiplier")
                currency = raw.get("currencyCode", raw.get("currency")) or DEFAULT_CURRENCY
                locations[name] = RichLocation(
                    multiplier=1.0 if multiplier is None else _positive(multiplier, f"location multiplier {name!r}"),
                    currency_code=str(currency),
                )
            else:
                locations[name] = FlatLocation(_positive(raw, f"location multiplier {name!r}"))

        return cls(
            projects=projects,
            quality_multipliers=dict(data.get("qualityMultipliers") or {}),
            location_multipliers=locations,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Flat JSON-serializable view of the table."""
        locations: Dict[str, Any] = {}
        for name, entry in self.location_multipliers.items():
            if isinstance(entry, RichLocation):
                locations[name] = {"multiplier": entry.multiplier, "currencyCode": entry.currency_code}
            else:
                locations[name] = entry.multiplier
        return {
            "projects": {
                name: {"laborPerArea": rate.labor_per_area, "materialPerArea": rate.material_per_area}
                for name, rate in self.projects.items()
            },
            "qualityMultipliers": dict(self.quality_multipliers),
            "locationMultipliers": locations,
        }


DEFAULT_RATE_TABLE = RateTable(
    projects={
        "Bathroom Remodel": ProjectRate(labor_per_area=25.0, material_per_area=40.0),
        "Kitchen Remodel": ProjectRate(labor_per_area=35.0, material_per_area=75.0),
        "Flooring": ProjectRate(labor_per_area=22.0, material_per_area=35.0),
        "Painting": ProjectRate(labor_per_area=2.5, material_per_area=1.25),
    },
    quality_multipliers={
        "Low": 0.85,
        "Medium": 1.0,
        "High": 1.25,
    },
    location_multipliers={
        "US": FlatLocation(1.0),
        "Ghana": RichLocation(multiplier=0.8, currency_code="GHS"),
    },
)


def load_rate_table(path: Optional[str] = None) -> RateTable:
    """
    Load a rate table from a JSON file.

    Args:
        path: JSON file path, or None for the built-in table

    Returns:
        RateTable
    """
    if not path:
        return DEFAULT_RATE_TABLE

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        raise RateTableError(f"Could not load rate table from {path}: {e}")

    table = RateTable.from_dict(data)
    logger.info(
        "Loaded rate table from %s (%d projects, %d qualities, %d locations)",
        path, len(table.projects), len(table.quality_multipliers), len(table.location_multipliers),
        extra={"rates_file": path},
    )
    return table
