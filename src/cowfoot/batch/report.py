"""
Batch results: one entry per farm, a summary, and CSV/JSON export.
"""

import csv
import json
import math
from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Literal

SOURCE_NAMES = ("enteric", "manure", "soil", "energy", "inputs")

INTENSITY_FIELDS = (
    "milk_kg_co2eq_per_kg_fpcm",
    "area_kg_co2eq_per_ha_total",
    "area_kg_co2eq_per_ha_productive",
    "land_use_efficiency",
)

PRODUCTION_FIELDS = (
    "fpcm_production_kg",
    "milk_production_kg",
    "milk_production_litres",
    "total_animals",
    "dairy_cows",
)

Status = Literal["succeeded", "failed", "skipped"]


@dataclass(frozen=True)
class BatchEntry:
    """Outcome for one farm record."""

    farm_id: str
    year: str
    status: Status
    emissions: dict[str, float | None] = field(default_factory=dict)
    total: float | None = None
    intensities: dict[str, float | None] = field(default_factory=dict)
    production: dict[str, float | None] = field(default_factory=dict)
    error: str | None = None
    warnings: tuple[str, ...] = ()
    details: dict | None = None

    @property
    def success(self) -> bool:
        return self.status == "succeeded"

    @classmethod
    def failed(cls, farm_id: str, year: str, error: str, status: Status = "failed") -> "BatchEntry":
        """Entry with every numeric output undefined."""
        return cls(
            farm_id=farm_id,
            year=year,
            status=status,
            emissions=dict.fromkeys(SOURCE_NAMES),
            intensities=dict.fromkeys(INTENSITY_FIELDS),
            production=dict.fromkeys(PRODUCTION_FIELDS),
            error=error,
        )


@dataclass(frozen=True)
class BatchSummary:
    n_processed: int
    n_succeeded: int
    n_failed: int
    n_skipped: int
    boundary: str
    tier: int
    # None when every source counts
    included_sources: tuple[str, ...] | None = None
    emission_factors: str = "IPCC2019"
    processed_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def boundary_description(self) -> str:
        """Scope with the sources it counts, e.g. "partial (enteric, manure)"."""
        if self.included_sources is None:
            return f"{self.boundary} (all sources)"
        return f"{self.boundary} ({', '.join(self.included_sources)})"


@dataclass(frozen=True)
class BatchReport:
    entries: tuple[BatchEntry, ...]
    summary: BatchSummary

    def __iter__(self):
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def __getitem__(self, index: int) -> BatchEntry:
        return self.entries[index]

    @property
    def succeeded(self) -> list[BatchEntry]:
        return [entry for entry in self.entries if entry.success]

    @property
    def failed(self) -> list[BatchEntry]:
        return [entry for entry in self.entries if entry.status == "failed"]

    def farm_rows(self) -> list[dict[str, Any]]:
        """One flat row per farm, in input order."""
        rows = []
        for entry in self.entries:
            row: dict[str, Any] = {
                "farm_id": entry.farm_id,
                "year": entry.year,
                "status": entry.status,
            }
            for name in SOURCE_NAMES:
                row[f"emissions_{name}"] = entry.emissions.get(name)
            row["emissions_total"] = entry.total
            for name in INTENSITY_FIELDS:
                key = name if name == "land_use_efficiency" else f"intensity_{name}"
                row[key] = entry.intensities.get(name)
            for name in PRODUCTION_FIELDS:
                row[name] = entry.production.get(name)
            row["boundaries_used"] = self.summary.boundary
            row["tier_used"] = f"tier_{self.summary.tier}"
            row["error"] = entry.error
            row["warnings"] = "; ".join(entry.warnings) or None
            rows.append(row)
        return rows

    def summary_rows(self) -> list[dict[str, Any]]:
        """Batch summary as metric/value rows, plus mean per-source emissions."""
        s = self.summary
        rows = [
            {"Metric": "Farms processed", "Value": s.n_processed},
            {"Metric": "Farms succeeded", "Value": s.n_succeeded},
            {"Metric": "Farms failed", "Value": s.n_failed},
            {"Metric": "Farms skipped", "Value": s.n_skipped},
            {"Metric": "Boundaries used", "Value": s.boundary},
            {"Metric": "Sources included", "Value": ", ".join(s.included_sources) if s.included_sources else "all"},
            {"Metric": "Emission factors", "Value": s.emission_factors},
            {"Metric": "Tier used", "Value": f"tier_{s.tier}"},
            {"Metric": "Processed at", "Value": s.processed_at.isoformat(timespec="seconds")},
        ]
        for name in (*SOURCE_NAMES, "total"):
            mean = self.mean_emissions(name)
            if mean is not None:
                rows.append({"Metric": f"Mean emissions {name} (kg CO2eq)", "Value": round(mean, 2)})
        return rows

    def mean_emissions(self, source: str) -> float | None:
        """Mean emissions of a source (or "total") over succeeded farms."""
        if source == "total":
            values = [entry.total for entry in self.succeeded if entry.total is not None]
        else:
            values = [entry.emissions[source] for entry in self.succeeded if entry.emissions.get(source) is not None]
        if not values:
            return None
        return math.fsum(values) / len(values)

    def write_csv(self, path: Path | str, summary_path: Path | str | None = None) -> tuple[Path, Path]:
        """Write the farm table and a <stem>_summary.csv next to it."""
        path = Path(path)
        summary_path = Path(summary_path) if summary_path else path.with_name(f"{path.stem}_summary{path.suffix}")

        rows = self.farm_rows()
        fieldnames = list(rows[0]) if rows else ["farm_id", "year", "status"]
        with open(path, "w", newline="", encoding="utf-8") as f:
            writer = csv.DictWriter(f, fieldnames=fieldnames)
            writer.writeheader()
            writer.writerows(rows)

        with open(summary_path, "w", newline="", encoding="utf-8") as f:
            writer = csv.DictWriter(f, fieldnames=["Metric", "Value"])
            writer.writeheader()
            writer.writerows(self.summary_rows())

        return path, summary_path

    def to_dict(self) -> dict:
        summary = asdict(self.summary)
        summary["processed_at"] = self.summary.processed_at.isoformat()
        summary["boundary_description"] = self.summary.boundary_description
        return {
            "summary": summary,
            "farms": [asdict(entry) for entry in self.entries],
        }

    def write_json(self, path: Path | str) -> Path:
        path = Path(path)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2, default=str)
        return path
