#!/usr/bin/env python3
"""
Plot per-farm emissions by source from a batch JSON report.

Usage:
    cowfoot batch farms.csv --json reports/farms.json
    python scripts/plot_breakdown.py reports/farms.json
"""

import json
import sys
from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))
from cowfoot.batch.report import SOURCE_NAMES
from cowfoot.core import get_output_dir
from cowfoot.core.units import kg_to_tonnes

SOURCE_COLORS = {
    "enteric": "#e74c3c",
    "manure": "#d35400",
    "soil": "#f1c40f",
    "energy": "#3498db",
    "inputs": "#9b59b6",
}


def create_breakdown_chart(report_path: Path) -> Path:
    """Create a stacked bar chart (t CO2eq) and an intensity panel."""
    with open(report_path) as f:
        report = json.load(f)

    farms = [farm for farm in report["farms"] if farm["status"] == "succeeded"]
    if not farms:
        raise SystemExit(f"No succeeded farms in {report_path}")

    labels = [farm["farm_id"] for farm in farms]
    x = np.arange(len(farms))

    fig, (ax1, ax2) = plt.subplots(1, 2, figsize=(14, 6))
    summary = report["summary"]
    fig.suptitle(
        f"Farm carbon footprint by source ({summary['boundary']}, tier {summary['tier']})",
        fontsize=14,
        fontweight="bold",
    )

    # Panel 1: Emissions by source
    bottom = np.zeros(len(farms))
    for source in SOURCE_NAMES:
        values = np.array([kg_to_tonnes(farm["emissions"].get(source) or 0.0) for farm in farms])
        ax1.bar(x, values, bottom=bottom, label=source, color=SOURCE_COLORS[source])
        bottom += values
    for i, total in enumerate(bottom):
        ax1.text(i, total, f"{total:,.0f}", ha="center", va="bottom", fontsize=9)
    ax1.set_xticks(x)
    ax1.set_xticklabels(labels, rotation=45, ha="right")
    ax1.set_ylabel("t CO2eq / year")
    ax1.set_title("Emissions by source")
    ax1.legend()

    # Panel 2: Milk intensity
    intensity = [farm["intensities"].get("milk_kg_co2eq_per_kg_fpcm") or 0.0 for farm in farms]
    ax2.bar(x, intensity, color="#34495e")
    ax2.set_xticks(x)
    ax2.set_xticklabels(labels, rotation=45, ha="right")
    ax2.set_ylabel("kg CO2eq / kg FPCM")
    ax2.set_title("Milk intensity")

    plt.tight_layout()
    output_path = get_output_dir() / f"{report_path.stem}_breakdown.png"
    plt.savefig(output_path, dpi=150, bbox_inches="tight", facecolor="white")
    plt.close(fig)
    return output_path


if __name__ == "__main__":
    if len(sys.argv) != 2:
        print(__doc__)
        sys.exit(1)
    path = create_breakdown_chart(Path(sys.argv[1]))
    print(f"Saved to {path}")
