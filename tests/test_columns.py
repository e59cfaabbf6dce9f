"""Tests for farm record resolution and CSV templates."""

import csv

import pytest

from cowfoot.batch.columns import (
    REQUIRED_COLUMNS,
    TEMPLATE_COLUMNS,
    missing_required,
    read_farm_records,
    resolve_farm_inputs,
    unknown_columns,
    write_template,
)
from cowfoot.core.validation import InputValidationError


class TestMissingRequired:
    """Tests for required column detection."""

    def test_complete_record(self, farm_record):
        """Verify a complete record has nothing missing."""
        assert missing_required(farm_record) == []

    def test_empty_and_na_cells_count_as_missing(self):
        """Verify empty and NA cells count as missing."""
        record = {"FarmID": "F1", "Milk_litres": "", "Cows_milking": "NA"}
        assert missing_required(record) == ["Milk_litres", "Cows_milking"]


class TestResolveFarmInputs:
    """Tests for the default cascade."""

    def test_minimal_record_defaults(self, farm_record):
        """Verify a record with only required columns gets the documented defaults."""
        farm = resolve_farm_inputs(farm_record, tier=2, row=1)
        assert farm.farm_id == "FARM001"
        assert farm.year == "2024"
        assert farm.milk_litres == 750000.0
        assert farm.cows_milking == 100.0
        assert farm.cows_dry == 0.0
        assert farm.bw_cows == 550.0
        assert farm.fat_percent == 4.0
        assert farm.protein_percent == 3.3
        assert farm.area_total_ha == 100.0
        assert farm.area_fertilized_ha == 100.0
        assert farm.country == "global"
        assert farm.manure_system == "pasture"
        assert farm.milk_yield_kg_cow_year == 6000.0
        assert farm.ym_percent == 6.5

    def test_tier1_defaults(self, farm_record):
        """Verify Tier 1 leaves milk yield unset and uses Ym 6.0."""
        farm = resolve_farm_inputs(farm_record, tier=1, row=1)
        assert farm.milk_yield_kg_cow_year is None
        assert farm.ym_percent == 6.0

    def test_intake_only_read_at_tier2(self):
        """Verify dry matter intake is only read for Tier 2."""
        record = {"FarmID": "F1", "Milk_litres": "1000", "Cows_milking": "10", "MS_intake_cows_milking_kg_day": "18"}
        assert resolve_farm_inputs(record, tier=1, row=1).dmi_cows_milking is None
        farm = resolve_farm_inputs(record, tier=2, row=1)
        assert farm.dmi_cows_milking == 18.0
        # Dry cows fall back to the milking intake
        assert farm.dmi_cows_dry == 18.0

    def test_dry_cow_body_weight_follows_milking_cows(self):
        """Verify dry cows inherit the milking cow body weight."""
        record = {"FarmID": "F1", "Milk_litres": "1000", "Cows_milking": "10", "Body_weight_cows_kg": "620"}
        farm = resolve_farm_inputs(record, tier=2, row=1)
        assert farm.bw_cows_dry == 620.0

    def test_fertilized_area_follows_total_area(self):
        """Verify fertilized area defaults to total area."""
        record = {"FarmID": "F1", "Milk_litres": "1000", "Cows_milking": "10", "Area_total_ha": "250"}
        assert resolve_farm_inputs(record, tier=2, row=1).area_fertilized_ha == 250.0

    def test_aliases(self):
        """Verify alternative column spellings are accepted."""
        record = {
            "FarmID": "F1",
            "Milk_litres": "1000",
            "Cows_milking": "10",
            "Electricity_KWh": "500",
            "N_fertilizer_synthetic_kg": "40",
        }
        farm = resolve_farm_inputs(record, tier=2, row=1)
        assert farm.electricity_kwh == 500.0
        assert farm.n_fertilizer_synthetic == 40.0

    def test_missing_farm_id_uses_row(self):
        """Verify a missing FarmID is replaced by the row number."""
        farm = resolve_farm_inputs({"Milk_litres": "1", "Cows_milking": "1"}, tier=2, row=7)
        assert farm.farm_id == "Farm_7"

    def test_area_breakdown(self, full_farm_record):
        """Verify land-use columns build an area breakdown."""
        farm = resolve_farm_inputs(full_farm_record, tier=2, row=1)
        assert farm.area_breakdown is not None
        assert all(hectares > 0 for hectares in farm.area_breakdown.values())

    def test_herd_totals(self):
        """Verify dairy cow and total animal counts."""
        record = {
            "FarmID": "F1",
            "Milk_litres": "1000",
            "Cows_milking": "100",
            "Cows_dry": "20",
            "Heifers_total": "30",
            "Calves_total": "25",
            "Bulls_total": "2",
        }
        farm = resolve_farm_inputs(record, tier=2, row=1)
        assert farm.dairy_cows == 120.0
        assert farm.total_animals == 177.0

    def test_negative_value_raises(self, farm_record):
        """Verify negative cells raise with the offending column."""
        record = {**farm_record, "Diesel_litres": "-50"}
        with pytest.raises(InputValidationError) as exc:
            resolve_farm_inputs(record, tier=2, row=1)
        assert exc.value.field == "Diesel_litres"

    def test_non_numeric_value_raises(self, farm_record):
        """Verify text in numeric columns is rejected."""
        record = {**farm_record, "Cows_dry": "twenty"}
        with pytest.raises(InputValidationError, match="must be numeric"):
            resolve_farm_inputs(record, tier=2, row=1)


class TestTemplate:
    """Tests for CSV template round trips."""

    def test_template_has_required_columns(self, tmp_path):
        """Verify the template header is the full column list."""
        path = write_template(tmp_path / "template.csv")
        with open(path, newline="") as f:
            header = next(csv.reader(f))
        assert set(REQUIRED_COLUMNS) <= set(header)
        assert tuple(header) == TEMPLATE_COLUMNS

    def test_examples_are_readable(self, tmp_path):
        """Verify example rows read back and resolve."""
        path = write_template(tmp_path / "template.csv", include_examples=True)
        records = read_farm_records(path)
        assert [r["FarmID"] for r in records] == ["FARM001", "FARM002"]
        # Unfilled cells come back empty and resolve to defaults
        farm = resolve_farm_inputs(records[1], tier=2, row=2)
        assert farm.fat_percent == 4.0
        assert farm.manure_system == "liquid_storage"

    def test_reader_strips_byte_order_mark(self, tmp_path):
        """Verify a UTF-8 BOM does not leak into the first column name."""
        path = tmp_path / "farms.csv"
        path.write_text("FarmID,Milk_litres,Cows_milking\nF1,1000,10\n", encoding="utf-8-sig")
        assert read_farm_records(path) == [{"FarmID": "F1", "Milk_litres": "1000", "Cows_milking": "10"}]

    def test_unknown_columns(self):
        """Verify unrecognised columns are reported."""
        assert unknown_columns(["FarmID", "Electricity_KWh", "Tractor_colour"]) == ["Tractor_colour"]
