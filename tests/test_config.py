"""Tests for settings and unit helpers."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from cowfoot.core import units
from cowfoot.core.config import Settings, get_output_dir, settings


class TestSettings:
    """Tests for environment-driven settings."""

    def test_defaults(self, monkeypatch):
        """Verify the defaults when no COWFOOT_ variables are set."""
        for name in ("COWFOOT_DEFAULT_SCOPE", "COWFOOT_DEFAULT_TIER", "COWFOOT_MAX_WORKERS"):
            monkeypatch.delenv(name, raising=False)
        fresh = Settings(_env_file=None)
        assert fresh.default_scope == "farm_gate"
        assert fresh.default_tier == 2
        assert fresh.max_workers == 1
        assert fresh.display_units == "kg"

    def test_environment_override(self, monkeypatch):
        """Verify tier and region can be set from the environment."""
        monkeypatch.setenv("COWFOOT_DEFAULT_TIER", "1")
        monkeypatch.setenv("COWFOOT_INPUTS_REGION", "EU")
        fresh = Settings(_env_file=None)
        assert fresh.default_tier == 1
        assert isinstance(fresh.default_tier, int)
        assert fresh.inputs_region == "EU"

    def test_tier_two_from_environment(self, monkeypatch):
        """Verify the text "2" from the environment becomes the integer tier 2."""
        monkeypatch.setenv("COWFOOT_DEFAULT_TIER", "2")
        assert Settings(_env_file=None).default_tier == 2

    def test_invalid_tier_rejected(self, monkeypatch):
        """Verify tiers other than 1 and 2 fail validation."""
        for value in ("3", "0"):
            monkeypatch.setenv("COWFOOT_DEFAULT_TIER", value)
            with pytest.raises(ValidationError):
                Settings(_env_file=None)


class TestGetOutputDir:
    """Tests for the get_output_dir function."""

    def test_returns_existing_directory(self):
        """Verify the output directory exists after the call."""
        result = get_output_dir()
        assert isinstance(result, Path)
        assert result.is_dir()

    def test_returns_same_path_on_multiple_calls(self):
        """Verify the output directory is cached."""
        assert get_output_dir() == get_output_dir()


class TestUnits:
    """Tests for unit conversion and formatting."""

    def test_litres_to_kg(self):
        """Verify milk density defaults to 1.03 kg per litre."""
        assert units.litres_to_kg(1000) == pytest.approx(1030.0)
        assert units.litres_to_kg(1000, 1.0) == pytest.approx(1000.0)

    def test_tonnes_round_trip(self):
        """Verify kg and tonne conversions invert each other."""
        assert units.kg_to_tonnes(2500) == pytest.approx(2.5)
        assert units.tonnes_to_kg(2.5) == pytest.approx(2500)

    def test_format_kg(self, monkeypatch):
        """Verify kilogram display uses thousands separators."""
        monkeypatch.setattr(settings, "display_units", "kg")
        assert units.format_co2eq(451512.62) == "451,513 kg CO2eq"

    def test_format_tonnes(self, monkeypatch):
        """Verify tonne display keeps two decimals."""
        monkeypatch.setattr(settings, "display_units", "t")
        assert units.format_co2eq(451512.62) == "451.51 t CO2eq"

    def test_format_missing(self):
        """Verify a missing value formats as n/a."""
        assert units.format_co2eq(None) == "n/a"
