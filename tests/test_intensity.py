"""Tests for milk and area intensities."""

import pytest

from cowfoot.accounting.total import AggregatedTotal
from cowfoot.analysis.intensity import (
    calc_intensity_area,
    calc_intensity_litre,
    fpcm_factor,
    total_value,
)
from cowfoot.core.validation import InputValidationError


class TestFpcm:
    """Tests for the FPCM correction."""

    def test_reference_composition_is_close_to_one(self):
        """Verify 4% fat and 3.3% protein is close to the 1.0 reference."""
        assert fpcm_factor(4.0, 3.3) == pytest.approx(0.99988)

    def test_richer_milk_scores_higher(self):
        """Verify richer milk gets a larger FPCM factor."""
        assert fpcm_factor(5.0, 3.8) > fpcm_factor(3.5, 3.0)


class TestTotalValue:
    """Tests for reading totals from different shapes."""

    def test_number(self):
        """Verify plain numbers pass through as floats."""
        assert total_value(100) == 100.0

    def test_aggregated_total(self):
        """Verify an AggregatedTotal contributes its total."""
        total = AggregatedTotal(total=250.0, breakdown={"enteric": 250.0}, source_count=1)
        assert total_value(total) == 250.0

    def test_mapping(self):
        """Verify totals are read from the usual mapping keys."""
        assert total_value({"total_co2eq_kg": 10.0}) == 10.0
        assert total_value({"co2eq_kg": 5.0}) == 5.0

    def test_mapping_without_total_raises(self):
        """Verify a mapping with no total field is rejected."""
        with pytest.raises(InputValidationError):
            total_value({"ch4_kg": 3.0})

    def test_negative_raises(self):
        """Verify negative totals are rejected."""
        with pytest.raises(InputValidationError):
            total_value(-1)


class TestIntensityLitre:
    """Tests for calc_intensity_litre."""

    def test_reference_farm(self):
        """Verify intensity for a farm with 750,000 L of standard milk."""
        result = calc_intensity_litre(451512.62, 750000)
        assert result["milk_production_kg"] == pytest.approx(772500.0)
        assert result["fpcm_production_kg"] == pytest.approx(772500.0 * 0.99988)
        assert result["intensity_co2eq_per_kg_fpcm"] == pytest.approx(451512.62 / (772500.0 * 0.99988))
        assert result["intensity_co2eq_per_litre"] == pytest.approx(451512.62 / 750000)

    def test_zero_milk_is_undefined(self):
        """Verify zero milk gives undefined intensities instead of dividing by zero."""
        result = calc_intensity_litre(1000, 0)
        assert result["intensity_co2eq_per_kg_fpcm"] is None
        assert result["intensity_co2eq_per_litre"] is None

    def test_missing_milk_is_undefined(self):
        """Verify missing milk gives undefined intensities."""
        result = calc_intensity_litre(1000, None)
        assert result["intensity_co2eq_per_kg_fpcm"] is None
        assert result["milk_production_kg"] is None

    def test_invalid_composition_raises(self):
        """Verify out-of-range fat and negative milk are rejected."""
        with pytest.raises(InputValidationError):
            calc_intensity_litre(1000, 1000, fat=150)
        with pytest.raises(InputValidationError):
            calc_intensity_litre(1000, -5)


class TestIntensityArea:
    """Tests for calc_intensity_area."""

    def test_total_area_only(self):
        """Verify total area counts as productive when no breakdown is given."""
        result = calc_intensity_area(1000, 100)
        assert result["intensity_per_total_ha"] == 10.0
        assert result["intensity_per_productive_ha"] == 10.0
        assert result["land_use_efficiency"] == 1.0

    def test_productive_area_from_breakdown(self):
        """Verify infrastructure and woodland are not productive land."""
        breakdown = {"pasture_permanent": 80, "infrastructure": 5, "woodland": 15}
        result = calc_intensity_area(1000, 100, area_breakdown=breakdown)
        assert result["area_productive_ha"] == 80.0
        assert result["intensity_per_productive_ha"] == 12.5
        assert result["land_use_efficiency"] == 0.8
        allocated = result["emissions_by_land_use"]["pasture_permanent"]
        assert allocated["emissions_co2eq_kg"] == pytest.approx(800.0)
        assert allocated["area_share_pct"] == 80.0

    def test_explicit_productive_area_wins(self):
        """Verify an explicit productive area overrides the breakdown."""
        breakdown = {"pasture_permanent": 80, "woodland": 20}
        result = calc_intensity_area(1000, 100, area_productive_ha=90, area_breakdown=breakdown)
        assert result["area_productive_ha"] == 90.0

    def test_zero_area_is_undefined(self):
        """Verify zero area gives an undefined intensity."""
        result = calc_intensity_area(1000, 0)
        assert result["intensity_per_total_ha"] is None

    def test_productive_exceeding_total_raises(self):
        """Verify productive area cannot exceed total area."""
        with pytest.raises(InputValidationError):
            calc_intensity_area(1000, 100, area_productive_ha=120)

    def test_unknown_category_raises(self):
        """Verify unknown land-use categories are rejected."""
        with pytest.raises(InputValidationError, match="Unknown land-use category"):
            calc_intensity_area(1000, 100, area_breakdown={"orchard": 10})

    def test_area_sum_validation(self):
        """Verify the breakdown must match total area only when asked."""
        breakdown = {"pasture_permanent": 50}
        with pytest.raises(InputValidationError):
            calc_intensity_area(1000, 100, area_breakdown=breakdown, validate_area_sum=True)
        # Without validation the mismatch is accepted
        assert calc_intensity_area(1000, 100, area_breakdown=breakdown)["area_productive_ha"] == 50.0
