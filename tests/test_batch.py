"""Tests for the batch orchestrator."""

from pathlib import Path

import pytest

from cowfoot.accounting.boundaries import set_system_boundaries
from cowfoot.batch.columns import resolve_farm_inputs
from cowfoot.batch.orchestrator import calc_batch, compute_source_results, process_farm


class ExplodingRecord(dict):
    """Farm row whose diesel column blows up when read."""

    def get(self, key, default=None):
        if key == "Diesel_litres":
            raise RuntimeError("diesel meter offline")
        return super().get(key, default)


class TestComputeSourceResults:
    """Tests for running source models for one farm."""

    def test_every_source_is_present(self, farm_record, farm_gate):
        """Verify every farm gets one result per on-farm source."""
        farm = resolve_farm_inputs(farm_record, tier=1, row=1)
        results = compute_source_results(farm, farm_gate)
        assert {r["source"] for r in results} == {"enteric", "manure", "soil", "energy", "inputs"}

    def test_inactive_sources_are_zero(self, farm_record, farm_gate):
        """Verify sources with no activity data report zero."""
        farm = resolve_farm_inputs(farm_record, tier=1, row=1)
        by_source = {r["source"]: r for r in compute_source_results(farm, farm_gate)}
        assert by_source["soil"]["co2eq_kg"] == 0.0
        assert by_source["energy"]["co2eq_kg"] == 0.0
        assert by_source["inputs"]["co2eq_kg"] == 0.0

    def test_one_enteric_result_per_cattle_group(self, full_farm_record, farm_gate):
        """Verify enteric CH4 is computed once per cattle group."""
        farm = resolve_farm_inputs(full_farm_record, tier=2, row=1)
        enteric = [r for r in compute_source_results(farm, farm_gate) if r["source"] == "enteric"]
        assert [r["category"] for r in enteric] == ["dairy_cows", "dairy_cows", "heifers", "calves", "bulls"]

    def test_excluded_sources_are_marked(self, farm_record):
        """Verify sources outside the boundary carry the excluded flag."""
        boundary = set_system_boundaries("partial", include=["enteric"])
        farm = resolve_farm_inputs(farm_record, tier=1, row=1)
        by_source = {r["source"]: r for r in compute_source_results(farm, boundary)}
        assert by_source["manure"]["excluded"] is True
        assert by_source["enteric"].get("excluded") is None


class TestProcessFarm:
    """Tests for the per-farm pipeline."""

    def test_tier1_minimal_farm(self, farm_record, farm_gate):
        """Verify the totals for 100 milking cows on pasture with Tier 1 factors."""
        entry = process_farm(farm_record, 1, tier=1, boundary=farm_gate)
        assert entry.status == "succeeded"
        assert entry.emissions["enteric"] == pytest.approx(312800.0)
        assert entry.emissions["manure"] == pytest.approx(108112.5)
        assert entry.emissions["soil"] == 0.0
        assert entry.total == pytest.approx(420912.5)

    def test_intensities(self, farm_record, farm_gate):
        """Verify milk and area intensities for the minimal farm."""
        entry = process_farm(farm_record, 1, tier=1, boundary=farm_gate)
        fpcm_kg = 750000 * 1.03 * 0.99988
        assert entry.intensities["milk_kg_co2eq_per_kg_fpcm"] == pytest.approx(420912.5 / fpcm_kg)
        # Default area is 100 ha, all productive
        assert entry.intensities["area_kg_co2eq_per_ha_total"] == pytest.approx(4209.125)
        assert entry.intensities["land_use_efficiency"] == 1.0
        assert entry.production["dairy_cows"] == 100.0

    def test_total_is_sum_of_sources(self, full_farm_record, farm_gate):
        """Verify the farm total equals the sum of its five sources."""
        entry = process_farm(full_farm_record, 1, tier=2, boundary=farm_gate)
        assert entry.status == "succeeded"
        assert entry.total == pytest.approx(sum(entry.emissions.values()))
        assert all(entry.emissions[name] > 0 for name in ("enteric", "manure", "soil", "energy", "inputs"))

    def test_missing_required_is_skipped(self, farm_gate):
        """Verify rows missing required columns are skipped, not failed."""
        entry = process_farm({"FarmID": "F9", "Milk_litres": "1000"}, 1, tier=2, boundary=farm_gate)
        assert entry.status == "skipped"
        assert entry.error == "Missing required columns: Cows_milking"
        assert entry.total is None

    def test_non_mapping_record_fails(self, farm_gate):
        """Verify a non-mapping row fails with a positional FarmID."""
        entry = process_farm(["FARM001", 1000, 10], 3, tier=2, boundary=farm_gate)
        assert entry.status == "failed"
        assert entry.farm_id == "Farm_3"

    def test_invalid_category_fails(self, farm_record, farm_gate):
        """Verify an unknown manure system fails the farm."""
        record = {**farm_record, "Manure_system": "lagoon"}
        entry = process_farm(record, 1, tier=2, boundary=farm_gate)
        assert entry.status == "failed"
        assert "manure_system" in entry.error

    def test_bad_composition_falls_back_with_warning(self, farm_record, farm_gate):
        """Verify bad milk composition falls back to uncorrected milk."""
        record = {**farm_record, "Fat_percent": "140"}
        entry = process_farm(record, 1, tier=1, boundary=farm_gate)
        assert entry.status == "succeeded"
        assert entry.intensities["milk_kg_co2eq_per_kg_fpcm"] == pytest.approx(420912.5 / 772500)
        assert any("uncorrected milk" in w for w in entry.warnings)

    def test_details(self, farm_record, farm_gate):
        """Verify detailed objects are attached when requested."""
        entry = process_farm(farm_record, 1, tier=1, boundary=farm_gate, save_detailed_objects=True)
        assert entry.details["aggregate"]["total_co2eq_kg"] == pytest.approx(entry.total)
        assert len(entry.details["sources"]) == 5

    def test_unexpected_error_fails_only_that_farm(self, farm_record, farm_gate):
        """Verify an unexpected exception becomes a failed entry with its type."""
        entry = process_farm(ExplodingRecord(farm_record), 4, tier=1, boundary=farm_gate)
        assert entry.status == "failed"
        assert entry.farm_id == "FARM001"
        assert entry.error == "RuntimeError: diesel meter offline"

    def test_farm_climate_reaches_soil_and_manure(self, farm_record, farm_gate):
        """Verify a warm farm uses warm manure and tropical soil factors."""
        record = {**farm_record, "Climate_zone": "warm", "N_fertilizer_kg": "1000"}
        entry = process_farm(record, 1, tier=1, boundary=farm_gate, save_detailed_objects=True)
        by_source = {r["source"]: r for r in entry.details["sources"]}
        assert by_source["manure"]["climate"] == "warm"
        assert by_source["soil"]["soil_conditions"]["climate"] == "tropical"

    def test_cold_climate_uses_temperate_soil_factors(self, farm_record, farm_gate):
        """Verify a cold farm uses cold manure and temperate soil factors."""
        record = {**farm_record, "Climate_zone": "cold", "N_fertilizer_kg": "1000"}
        entry = process_farm(record, 1, tier=1, boundary=farm_gate, save_detailed_objects=True)
        by_source = {r["source"]: r for r in entry.details["sources"]}
        assert by_source["manure"]["climate"] == "cold"
        assert by_source["soil"]["soil_conditions"]["climate"] == "temperate"


class TestCalcBatch:
    """Tests for calc_batch."""

    def test_failed_farm_does_not_stop_batch(self, farm_record, full_farm_record):
        """Verify one bad row is recorded and the other farms still run."""
        bad = {**farm_record, "FarmID": "BAD", "Diesel_litres": "-50"}
        report = calc_batch([farm_record, bad, full_farm_record], tier=2)
        assert [e.status for e in report] == ["succeeded", "failed", "succeeded"]
        assert "Diesel_litres" in report[1].error
        assert report[1].emissions == dict.fromkeys(("enteric", "manure", "soil", "energy", "inputs"))
        assert report.summary.n_processed == 3
        assert report.summary.n_succeeded == 2
        assert report.summary.n_failed == 1

    def test_unexpected_error_does_not_stop_batch(self, farm_record, full_farm_record):
        """Verify an unexpected error in one farm spares the rest, sequential or parallel."""
        records = [farm_record, ExplodingRecord(full_farm_record), full_farm_record]
        for workers in (1, 3):
            report = calc_batch(records, tier=1, max_workers=workers)
            assert [e.status for e in report] == ["succeeded", "failed", "succeeded"]
            assert report[1].error.startswith("RuntimeError")
            assert report.summary.n_failed == 1

    def test_skipped_count(self, farm_record):
        """Verify skipped rows are counted apart from failures."""
        report = calc_batch([farm_record, {"FarmID": "X"}], tier=1)
        assert report.summary.n_skipped == 1
        assert report.summary.n_failed == 0

    def test_empty_records_raise(self):
        """Verify an empty batch is rejected."""
        with pytest.raises(ValueError, match="No farm records"):
            calc_batch([])

    def test_path_raises(self):
        """Verify file paths are rejected in place of records."""
        with pytest.raises(ValueError, match="not a file path"):
            calc_batch("farms.csv")
        with pytest.raises(ValueError):
            calc_batch(Path("farms.csv"))

    def test_invalid_tier_raises(self, farm_record):
        """Verify only tiers 1 and 2 are accepted."""
        with pytest.raises(ValueError, match="tier must be 1 or 2"):
            calc_batch([farm_record], tier=3)

    def test_default_boundary(self, farm_record):
        """Verify batches default to the farm_gate boundary."""
        report = calc_batch([farm_record], tier=1)
        assert report.summary.boundary == "farm_gate"

    def test_partial_boundary(self, full_farm_record):
        """Verify only included sources count toward the total."""
        boundary = set_system_boundaries("partial", include=["enteric", "manure"])
        entry = calc_batch([full_farm_record], tier=2, boundaries=boundary)[0]
        assert entry.emissions["soil"] == 0.0
        assert entry.emissions["energy"] == 0.0
        assert entry.total == pytest.approx(entry.emissions["enteric"] + entry.emissions["manure"])

        full = calc_batch([full_farm_record], tier=2)[0]
        assert entry.total < full.total

    def test_summary_records_boundary_configuration(self, farm_record):
        """Verify the summary keeps the included sources and factor set."""
        boundary = set_system_boundaries("partial", include=["manure", "enteric"])
        summary = calc_batch([farm_record], tier=1, boundaries=boundary).summary
        assert summary.boundary == "partial"
        assert summary.included_sources == ("enteric", "manure")
        assert summary.emission_factors == "IPCC2019"
        assert summary.boundary_description == "partial (enteric, manure)"

    def test_full_boundary_summary_includes_all_sources(self, farm_record):
        """Verify an unbounded run is described as covering all sources."""
        summary = calc_batch([farm_record], tier=1, boundaries=set_system_boundaries("full")).summary
        assert summary.included_sources is None
        assert summary.boundary_description == "full (all sources)"

    def test_parallel_keeps_input_order(self, farm_record):
        """Verify parallel runs return entries in input order."""
        records = [{**farm_record, "FarmID": f"F{i:02d}", "Cows_milking": str(50 + i)} for i in range(12)]
        report = calc_batch(records, tier=2, max_workers=4)
        assert [e.farm_id for e in report] == [f"F{i:02d}" for i in range(12)]

    def test_parallel_matches_sequential(self, farm_record, full_farm_record):
        """Verify parallel and sequential runs agree."""
        records = [farm_record, full_farm_record] * 3
        sequential = calc_batch(records, tier=2, max_workers=1)
        parallel = calc_batch(records, tier=2, max_workers=3)
        assert sequential.entries == parallel.entries

    def test_repeat_runs_are_identical(self, full_farm_record):
        """Verify repeated runs give identical entries."""
        first = calc_batch([full_farm_record], tier=2)
        second = calc_batch([full_farm_record], tier=2)
        assert first.entries == second.entries

    def test_duplicate_ids_warn(self, farm_record, caplog):
        """Verify duplicate FarmIDs are processed and logged."""
        report = calc_batch([farm_record, farm_record], tier=1)
        assert len(report) == 2
        assert "Duplicate FarmIDs" in caplog.text
