#!/usr/bin/env python3
"""Tests for quote assembly and restoring saved inputs."""

import os
import sys
from dataclasses import replace

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(os.path.abspath(__file__)), 'src'))

from calculator import QuoteInputs, ClientSnapshot, MaterialExtra, build_quote, round2, RateTable, ProjectRate, RichLocation
from calculator.normalizer import SQFT_PER_SQM


@pytest.fixture
def inputs():
    return QuoteInputs.defaults()


def test_defaults_follow_rate_table(inputs):
    assert inputs.role == "Homeowner"
    assert inputs.project_type == "Bathroom Remodel"
    assert inputs.quality == "Medium"
    assert inputs.location == "US"
    assert inputs.unit == "sqft"
    assert inputs.size == 100
    assert inputs.currency_mode == "Auto"
    assert (inputs.overhead_pct, inputs.tax_pct, inputs.discount_pct) == (10, 0, 0)
    assert (inputs.labor_markup_pct, inputs.material_markup_pct) == (15, 10)


def test_defaults_skip_missing_overrides():
    inputs = QuoteInputs.defaults(project_type="Flooring", quality=None)
    assert inputs.project_type == "Flooring"
    assert inputs.quality == "Medium"


def test_build_default_quote(inputs):
    quote = build_quote(inputs)
    assert quote.ok
    assert quote.area_sqft == 100
    assert quote.estimate.total == 6500.0
    assert quote.totals.grand_total == 8002.5
    assert quote.currency == "USD"
    formatted = quote.formatted()
    assert formatted["grand_total"] == "$8,002.50"
    assert " – " in formatted["range"]


def test_square_meters_are_converted(inputs):
    quote = build_quote(replace(inputs, unit="sqm", size=10))
    assert quote.area_sqft == pytest.approx(10 * SQFT_PER_SQM)
    assert quote.estimate.total == round2(quote.estimate.labor + quote.estimate.material)
    assert quote.estimate.total > build_quote(replace(inputs, size=10)).estimate.total


def test_local_currency(inputs):
    quote = build_quote(replace(inputs, location="Ghana"))
    assert quote.currency == "GHS"
    assert quote.estimate.total == 5200.0


def test_currency_override_only_changes_display(inputs):
    auto = build_quote(inputs)
    euro = build_quote(replace(inputs, currency_mode="EUR"))
    assert euro.currency == "EUR"
    assert euro.estimate.currency_code == "USD"
    assert euro.totals == auto.totals
    assert "€" in euro.formatted()["grand_total"]


def test_unknown_override_is_labelled_as_displayed(inputs):
    quote = build_quote(replace(inputs, currency_mode="QQQ"))
    assert quote.formatter.is_fallback
    assert quote.currency == "USD"
    assert quote.formatted()["total"] == "$6,500.00"
    assert quote.history_entry(1)["currency"] == "USD"


def test_withdrawn_local_currency_is_labelled_usd():
    table = RateTable(
        projects={"Test": ProjectRate(labor_per_area=10, material_per_area=10)},
        quality_multipliers={"Medium": 1.0},
        location_multipliers={"Sarajevo": RichLocation(1.0, "BAD")},
    )
    quote = build_quote(QuoteInputs.defaults(table), table)
    assert quote.estimate.currency_code == "BAD"
    assert quote.currency == "USD"
    assert quote.formatted()["total"] == "$2,000.00"


def test_estimate_error_is_reported(inputs):
    quote = build_quote(replace(inputs, project_type="Nope"))
    assert not quote.ok
    assert quote.error == "Unknown project type"
    assert quote.estimate.total == 0
    assert quote.totals.grand_total == 0


def test_unknown_unit_is_invalid_area(inputs):
    quote = build_quote(replace(inputs, unit="acres"))
    assert quote.error == "Invalid room size"


def test_history_entry(inputs):
    quote = build_quote(replace(inputs, material_additions=[MaterialExtra(name="Tile", cost=100)]))
    entry = quote.history_entry(1700000000000)
    assert entry["ts"] == 1700000000000
    assert entry["projectType"] == "Bathroom Remodel"
    assert entry["baseTotal"] == 6500.0
    assert entry["total"] == quote.totals.grand_total
    assert entry["materialExtrasTotal"] == 100.0
    assert entry["currency"] == "USD"
    for key in ("laborBase", "laborFinal", "materialBase", "materialFinal",
                "laborMarkupPct", "materialMarkupPct", "overheadPct", "discountPct", "taxPct"):
        assert key in entry


def test_apply_record_takes_valid_values_only(inputs):
    record = {
        "role": "Admin",
        "projectType": "Flooring",
        "quality": "Ultra",
        "location": "Ghana",
        "unit": "acres",
        "sizeInput": "250",
        "currencyMode": "EURO",
        "overheadPct": "abc",
        "taxPct": 8.125,
        "discountPct": None,
        "materialAdditions": [{"name": "Tile", "cost": "12.5", "id": "tile"}, {"cost": 5}, "junk"],
        "client": {"name": "Kelly", "email": 42},
    }
    restored = inputs.apply_record(record)
    assert restored.role == "Homeowner"
    assert restored.project_type == "Flooring"
    assert restored.quality == "Medium"
    assert restored.location == "Ghana"
    assert restored.unit == "sqft"
    assert restored.size == 250.0
    assert restored.currency_mode == "Auto"
    assert restored.overhead_pct == 10
    assert restored.tax_pct == 8.13
    assert restored.discount_pct == 0
    assert len(restored.material_additions) == 1
    assert restored.material_additions[0].name == "Tile"
    assert restored.material_additions[0].cost == 12.5
    assert restored.material_additions[0].id == "tile"
    assert restored.client == ClientSnapshot(name="Kelly", email="42")
    assert inputs.project_type == "Bathroom Remodel"


def test_apply_history_entry(inputs):
    entry = build_quote(replace(inputs, project_type="Painting", size=321, currency_mode="GHS")).history_entry(1)
    restored = QuoteInputs.defaults().apply_record(entry)
    assert restored.project_type == "Painting"
    assert restored.size == 321
    assert restored.currency_mode == "GHS"


def test_apply_record_ignores_non_mappings(inputs):
    assert inputs.apply_record(None) == inputs
    assert inputs.apply_record(["x"]) == inputs


def test_draft_record_round_trip(inputs):
    edited = replace(
        inputs,
        role="Contractor",
        quality="High",
        unit="sqm",
        size=42.5,
        discount_pct=5,
        material_additions=[MaterialExtra(name="Grout", cost=9.99)],
        client=ClientSnapshot(name="Sam", notes="Back door"),
    )
    record = edited.to_draft_record(123)
    assert record["ts"] == 123
    assert record["sizeInput"] == 42.5
    restored = QuoteInputs.defaults().apply_record(record)
    assert restored == edited


def test_query_params_round_trip(inputs):
    edited = replace(inputs, project_type="Flooring", quality="High", size=60, overhead_pct=0, tax_pct=7.5)
    params = edited.to_query_params()
    assert params["s"] == "60"
    assert params["oh"] == "0"
    assert params["tax"] == "7.5"
    restored = QuoteInputs.from_query_params(params)
    assert restored == edited


def test_query_params_ignore_invalid_values():
    restored = QuoteInputs.from_query_params({"p": "Nope", "s": "lots", "q": "High"})
    assert restored.project_type == "Bathroom Remodel"
    assert restored.size == 100
    assert restored.quality == "High"
