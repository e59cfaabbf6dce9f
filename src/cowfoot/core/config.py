from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# .env file sits in the project root (parent of src/)
# Only use if it exists (CI uses environment variables directly)
# Path: core/config.py -> cowfoot -> src -> project root -> .env
_ENV_FILE = Path(__file__).parent.parent.parent.parent / ".env"
_ENV_FILE = _ENV_FILE if _ENV_FILE.exists() else None


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="COWFOOT_",
        env_file=_ENV_FILE,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # System boundary used when a caller passes none ("farm_gate", "full", ...)
    default_scope: str = "farm_gate"

    # IPCC tier for batch runs (1 = default factors, 2 = animal-specific)
    default_tier: int = Field(2, ge=1, le=2)

    # Label recorded on boundaries and reports
    emission_factors: str = "IPCC2019"

    # Regional factor table for purchased inputs
    inputs_region: str = "global"

    # Worker threads for batch runs (1 = sequential)
    max_workers: int = 1

    # Monte Carlo draws for purchased-input uncertainty
    monte_carlo_draws: int = 1000

    # Display units for CLI output ("kg" = kg CO2eq, "t" = tonnes CO2eq)
    display_units: Literal["kg", "t"] = "kg"

    # Where the CLI writes reports; defaults to reports/ in the project root
    output_dir: Path | None = None


settings = Settings()


@lru_cache
def get_output_dir() -> Path:
    """Get the report output directory.

    Uses settings.output_dir when set. Otherwise looks for the project root
    (a directory holding .git or pyproject.toml) and returns reports/ within it.
    """
    if settings.output_dir is not None:
        output_dir = Path(settings.output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        return output_dir

    current = Path(__file__).resolve()
    for parent in current.parents:
        if (parent / ".git").exists() or (parent / "pyproject.toml").exists():
            output_dir = parent / "reports"
            output_dir.mkdir(exist_ok=True)
            return output_dir
    # Fallback to current working directory
    output_dir = Path.cwd() / "reports"
    output_dir.mkdir(exist_ok=True)
    return output_dir
