"""
Quote Store for QuickQuote

Keeps saved quotes (history), the working draft and material favorites
in a single JSON file, one top-level key per collection.

Storage failures are logged, never raised.
"""

import json
import logging
import math
import os
import time
from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Optional

from calculator import Quote, QuoteInputs, round2
from calculator.normalizer import parse_float
from calculator.totals import make_id

from api.config import DATA_FILE

logger = logging.getLogger(__name__)

STORAGE_KEYS = {
    "history": "qq_history_v1",
    "draft": "qq_draft_v2",
    "materials": "qq_material_favorites_v1",
}

MAX_HISTORY = 5


@dataclass
class MaterialFavorite:
    """A reusable material line with a default cost."""
    id: str
    name: str
    cost: float


DEFAULT_MATERIAL_FAVORITES = [
    MaterialFavorite(id="drywall-sheet", name="Drywall Sheet (4x8)", cost=18),
    MaterialFavorite(id="lvp-box", name="Luxury Vinyl Plank (box)", cost=62),
    MaterialFavorite(id="paint-gallon", name="Interior Paint (gallon)", cost=42),
    MaterialFavorite(id="trim-pack", name="Finish Trim Pack", cost=55),
    MaterialFavorite(id="led-kit", name="LED Recessed Light Kit", cost=78),
]


def now_ms() -> int:
    return int(time.time() * 1000)


class QuoteStore:
    """Quote history, draft and material favorites with file persistence."""

    def __init__(self, data_file: Optional[str] = None):
        self.data_file = data_file or DATA_FILE
        self.history: List[Dict[str, Any]] = []
        self.draft: Optional[Dict[str, Any]] = None
        self.favorites: List[MaterialFavorite] = [
            MaterialFavorite(**asdict(fav)) for fav in DEFAULT_MATERIAL_FAVORITES
        ]
        self._load_from_file()

    def _load_from_file(self):
        """Load saved collections from the JSON file if it exists."""
        try:
            if not os.path.exists(self.data_file):
                return
            with open(self.data_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(
                "Could not load quote data from %s: %s", self.data_file, e,
                extra={"data_file": self.data_file},
            )
            return

        if not isinstance(data, dict):
            logger.warning(
                "Ignoring quote data in %s: not an object", self.data_file,
                extra={"data_file": self.data_file},
            )
            return

        history = data.get(STORAGE_KEYS["history"])
        if isinstance(history, list):
            self.history = [entry for entry in history if isinstance(entry, dict)]

        draft = data.get(STORAGE_KEYS["draft"])
        if isinstance(draft, dict):
            self.draft = draft

        favorites = data.get(STORAGE_KEYS["materials"])
        if isinstance(favorites, list):
            self.favorites = [
                MaterialFavorite(
                    id=item.get("id") or make_id(),
                    name=item["name"],
                    cost=round2(item.get("cost")),
                )
                for item in favorites
                if isinstance(item, dict) and item.get("name")
            ]

    def _save_to_file(self):
        """Write all collections to the JSON file."""
        data = {
            STORAGE_KEYS["history"]: self.history,
            STORAGE_KEYS["materials"]: [asdict(fav) for fav in self.favorites],
        }
        if self.draft is not None:
            data[STORAGE_KEYS["draft"]] = self.draft
        try:
            with open(self.data_file, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
        except (OSError, TypeError, ValueError) as e:
            logger.warning(
                "Could not save quote data to %s: %s", self.data_file, e,
                extra={"data_file": self.data_file},
            )

    # =========================================================================
    # History
    # =========================================================================

    def list_history(self) -> List[Dict[str, Any]]:
        """Saved quotes, newest first."""
        return list(self.history)

    def save_quote(self, quote: Quote, ts: Optional[int] = None) -> Optional[Dict[str, Any]]:
        """
        Save a computed quote at the top of the history.

        Only the most recent entries are kept.

        Returns:
            The saved entry, or None if the quote has an estimate error
        """
        if quote.error:
            return None

        entry = quote.history_entry(ts if ts is not None else now_ms())
        self.history = [entry] + self.history[:MAX_HISTORY - 1]
        self._save_to_file()
        return entry

    def clear_history(self):
        self.history = []
        self._save_to_file()

    # =========================================================================
    # Draft
    # =========================================================================

    def save_draft(self, inputs: QuoteInputs, ts: Optional[int] = None) -> Dict[str, Any]:
        """Replace the working draft."""
        self.draft = inputs.to_draft_record(ts if ts is not None else now_ms())
        self._save_to_file()
        return self.draft

    def load_draft(self) -> Optional[Dict[str, Any]]:
        """The saved draft record, or None."""
        return self.draft

    def clear_draft(self):
        self.draft = None
        self._save_to_file()

    # =========================================================================
    # Material favorites
    # =========================================================================

    def list_favorites(self) -> List[MaterialFavorite]:
        return list(self.favorites)

    def get_favorite(self, favorite_id: str) -> Optional[MaterialFavorite]:
        for fav in self.favorites:
            if fav.id == favorite_id:
                return fav
        return None

    def add_favorite(self, name: str, cost: Any) -> Optional[MaterialFavorite]:
        """
        Add a material favorite.

        Args:
            name: Display name (surrounding whitespace is trimmed)
            cost: Cost as a number or free text ("42.50")

        Returns:
            The new favorite, or None when the name is blank or the
            cost is not a number
        """
        trimmed = (name or "").strip()
        parsed = parse_float(cost)
        if not trimmed or not math.isfinite(parsed):
            return None

        favorite = MaterialFavorite(id=make_id(), name=trimmed, cost=round2(parsed))
        self.favorites.append(favorite)
        self._save_to_file()
        return favorite

    def remove_favorite(self, favorite_id: str) -> bool:
        """Remove a favorite by id. Returns False if it did not exist."""
        remaining = [fav for fav in self.favorites if fav.id != favorite_id]
        if len(remaining) == len(self.favorites):
            return False
        self.favorites = remaining
        self._save_to_file()
        return True


# Global store instance
quote_store = QuoteStore()
