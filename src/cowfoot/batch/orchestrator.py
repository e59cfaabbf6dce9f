"""
Batch processing of farm records.

For each record the pipeline resolves inputs, runs the source models the
system boundary includes, normalizes and aggregates their results, then
derives milk and area intensities. A farm that fails is recorded with
its error and the batch moves on; entries keep the input order.
"""

import logging
from collections import Counter
from collections.abc import Iterable, Mapping
from concurrent.futures import ThreadPoolExecutor
from functools import partial
from pathlib import Path
from typing import Any

from cowfoot.accounting.boundaries import SystemBoundary, set_system_boundaries
from cowfoot.accounting.normalize import ExtractionError, normalize_result
from cowfoot.accounting.total import AggregationError, aggregate, ensure_source
from cowfoot.analysis.intensity import calc_intensity_area, calc_intensity_litre
from cowfoot.batch.columns import FarmInputs, missing_required, resolve_farm_inputs
from cowfoot.batch.report import SOURCE_NAMES, BatchEntry, BatchReport, BatchSummary
from cowfoot.core.coerce import scalar_str
from cowfoot.core.config import settings
from cowfoot.core.validation import InputValidationError
from cowfoot.sources import (
    calc_emissions_energy,
    calc_emissions_enteric,
    calc_emissions_inputs,
    calc_emissions_manure,
    calc_emissions_soil,
    excluded_result,
)

logger = logging.getLogger(__name__)

# Farm climate zone -> the zone each model accepts
SOIL_CLIMATES = {"cold": "temperate", "temperate": "temperate", "warm": "tropical", "tropical": "tropical"}
MANURE_CLIMATES = {"cold": "cold", "temperate": "temperate", "warm": "warm", "tropical": "warm"}


# =============================================================================
# Source Computation
# =============================================================================


def _zero_result(source: str) -> dict:
    return {"source": source, "co2eq_kg": 0.0}


def _young_stock(category: str, body_weight: float, intake: float | None) -> dict:
    return {"cattle_category": category, "avg_body_weight": body_weight, "dry_matter_intake": intake}


def _enteric_cohorts(farm: FarmInputs) -> list[tuple[float, dict]]:
    """(head count, model kwargs) for each cattle group on the farm."""
    milking = {
        "cattle_category": "dairy_cows",
        "avg_body_weight": farm.bw_cows,
        "dry_matter_intake": farm.dmi_cows_milking,
    }
    if farm.milk_yield_kg_cow_year is not None:
        milking["avg_milk_yield"] = farm.milk_yield_kg_cow_year
    dry = {
        "cattle_category": "dairy_cows",
        "avg_body_weight": farm.bw_cows_dry,
        "dry_matter_intake": farm.dmi_cows_dry,
        "avg_milk_yield": 0,
    }
    return [
        (farm.cows_milking, milking),
        (farm.cows_dry, dry),
        (farm.heifers, _young_stock("heifers", farm.bw_heifers, farm.dmi_heifers)),
        (farm.calves, _young_stock("calves", farm.bw_calves, farm.dmi_calves)),
        (farm.bulls, _young_stock("bulls", farm.bw_bulls, farm.dmi_bulls)),
    ]


def compute_source_results(farm: FarmInputs, boundary: SystemBoundary) -> list[dict]:
    """
    Run each source model the boundary includes and the farm has activity for.

    Excluded sources get the standard excluded result and inactive ones a
    zero result, so every source name is always present. Enteric returns
    one result per cattle group, all named "enteric".
    """
    results: list[dict] = []

    if not boundary.is_included("enteric"):
        results.append(excluded_result("enteric"))
    else:
        cohorts = [(n, kwargs) for n, kwargs in _enteric_cohorts(farm) if n > 0]
        for n_animals, kwargs in cohorts:
            results.append(
                calc_emissions_enteric(
                    n_animals,
                    ym_percent=farm.ym_percent,
                    tier=farm.tier,
                    boundaries=boundary,
                    **kwargs,
                )
            )
        if not cohorts:
            results.append(_zero_result("enteric"))

    if not boundary.is_included("manure"):
        results.append(excluded_result("manure"))
    elif farm.total_animals > 0:
        results.append(
            calc_emissions_manure(
                farm.total_animals,
                manure_system=farm.manure_system,
                n_excreted=farm.n_excreted_per_cow,
                include_indirect=True,
                climate=MANURE_CLIMATES.get(farm.climate, farm.climate),
                boundaries=boundary,
            )
        )
    else:
        results.append(_zero_result("manure"))

    if not boundary.is_included("soil"):
        results.append(excluded_result("soil"))
    elif farm.soil_n > 0:
        results.append(
            calc_emissions_soil(
                n_fertilizer_synthetic=farm.n_fertilizer_synthetic,
                n_fertilizer_organic=farm.n_fertilizer_organic,
                n_excreta_pasture=farm.n_excreta_pasture,
                n_crop_residues=farm.n_crop_residues,
                area_ha=farm.area_fertilized_ha,
                soil_type=farm.soil_type,
                climate=SOIL_CLIMATES.get(farm.climate, farm.climate),
                include_indirect=True,
                boundaries=boundary,
            )
        )
    else:
        results.append(_zero_result("soil"))

    if not boundary.is_included("energy"):
        results.append(excluded_result("energy"))
    elif farm.energy_use > 0:
        results.append(
            calc_emissions_energy(
                diesel_l=farm.diesel_l,
                petrol_l=farm.petrol_l,
                lpg_kg=farm.lpg_kg,
                natural_gas_m3=farm.natural_gas_m3,
                electricity_kwh=farm.electricity_kwh,
                coal_kg=farm.coal_kg,
                biomass_kg=farm.biomass_kg,
                country=farm.country,
                boundaries=boundary,
            )
        )
    else:
        results.append(_zero_result("energy"))

    if not boundary.is_included("inputs"):
        results.append(excluded_result("inputs"))
    elif farm.purchased_inputs > 0:
        results.append(
            calc_emissions_inputs(
                conc_kg=farm.concentrate_kg,
                fert_n_kg=farm.n_fertilizer_synthetic,
                plastic_kg=farm.plastic_kg,
                region=farm.region,
                boundaries=boundary,
                **farm.feeds_kg,
            )
        )
    else:
        results.append(_zero_result("inputs"))

    return results


# =============================================================================
# Intensities
# =============================================================================


def _milk_intensity(total: float, farm: FarmInputs, warnings: list[str]) -> dict:
    try:
        result = calc_intensity_litre(
            total,
            farm.milk_litres,
            fat=farm.fat_percent,
            protein=farm.protein_percent,
            milk_density=farm.milk_density,
        )
    except InputValidationError as e:
        # Uncorrected milk mass instead of FPCM
        milk_kg = farm.milk_litres * farm.milk_density
        warnings.append(f"Milk intensity uses uncorrected milk: {e}")
        return {
            "intensity_co2eq_per_kg_fpcm": total / milk_kg if milk_kg > 0 else None,
            "fpcm_production_kg": None,
            "milk_production_kg": milk_kg,
        }
    return result


def _area_intensity(total: float, farm: FarmInputs, warnings: list[str]) -> dict:
    try:
        result = calc_intensity_area(
            total,
            farm.area_total_ha,
            area_productive_ha=farm.area_productive_ha,
            area_breakdown=farm.area_breakdown,
            validate_area_sum=False,
        )
    except InputValidationError as e:
        area = farm.area_total_ha
        warnings.append(f"Area intensity uses total area only: {e}")
        return {
            "intensity_per_total_ha": total / area if area > 0 else None,
            "intensity_per_productive_ha": None,
            "land_use_efficiency": None,
        }
    return result


# =============================================================================
# Per-farm Pipeline
# =============================================================================


def process_farm(
    record: Mapping[str, Any],
    row: int,
    tier: int,
    boundary: SystemBoundary,
    save_detailed_objects: bool = False,
) -> BatchEntry:
    """
    Run the full pipeline for one farm record.

    Farm-level problems are returned as a failed or skipped entry.

    Raises:
        AggregationError: Never for well-formed source lists; a raise here
            means the calling code is broken
    """
    if not isinstance(record, Mapping):
        return BatchEntry.failed(f"Farm_{row}", "", f"Record must be a mapping, got {type(record).__name__}")

    farm_id = f"Farm_{row}"
    year = ""
    try:
        farm_id = scalar_str(record.get("FarmID")) or farm_id
        year = scalar_str(record.get("Year")) or ""

        missing = missing_required(record)
        if missing:
            logger.warning("Skipping farm %s: missing %s", farm_id, ", ".join(missing))
            message = f"Missing required columns: {', '.join(missing)}"
            return BatchEntry.failed(farm_id, year, message, status="skipped")

        farm = resolve_farm_inputs(record, tier, row)
        results = [ensure_source(result, result["source"]) for result in compute_source_results(farm, boundary)]
        contributions = [normalize_result(result, i) for i, result in enumerate(results, start=1)]
        aggregated = aggregate(contributions)

        # Only categories inside the boundary count toward the total
        total = sum(amount for name, amount in aggregated.breakdown.items() if boundary.is_included(name))
        if total != aggregated.total:
            logger.warning(
                "Farm %s: aggregate %.2f differs from in-boundary total %.2f",
                farm_id,
                aggregated.total,
                total,
            )

        warnings: list[str] = []
        milk = _milk_intensity(total, farm, warnings)
        area = _area_intensity(total, farm, warnings)
    except AggregationError:
        raise
    except (InputValidationError, ExtractionError) as e:
        logger.warning("Farm %s failed: %s", farm_id, e)
        return BatchEntry.failed(farm_id, year, str(e))
    except Exception as e:
        # Bugs and unexpected record types still fail only their own farm
        logger.exception("Farm %s failed with an unexpected error", farm_id)
        return BatchEntry.failed(farm_id, year, f"{type(e).__name__}: {e}")

    details = None
    if save_detailed_objects:
        details = {
            "inputs": farm,
            "sources": results,
            "aggregate": aggregated.to_dict(),
            "milk_intensity": milk,
            "area_intensity": area,
        }

    return BatchEntry(
        farm_id=farm.farm_id,
        year=farm.year,
        status="succeeded",
        emissions={name: aggregated.breakdown.get(name, 0.0) for name in SOURCE_NAMES},
        total=total,
        intensities={
            "milk_kg_co2eq_per_kg_fpcm": milk.get("intensity_co2eq_per_kg_fpcm"),
            "area_kg_co2eq_per_ha_total": area.get("intensity_per_total_ha"),
            "area_kg_co2eq_per_ha_productive": area.get("intensity_per_productive_ha"),
            "land_use_efficiency": area.get("land_use_efficiency"),
        },
        production={
            "fpcm_production_kg": milk.get("fpcm_production_kg"),
            "milk_production_kg": milk.get("milk_production_kg"),
            "milk_production_litres": farm.milk_litres,
            "total_animals": farm.total_animals,
            "dairy_cows": farm.dairy_cows,
        },
        warnings=tuple(warnings),
        details=details,
    )


def calc_batch(
    records: Iterable[Mapping[str, Any]],
    tier: int | None = None,
    boundaries: SystemBoundary | None = None,
    max_workers: int | None = None,
    save_detailed_objects: bool = False,
) -> BatchReport:
    """
    Compute emissions and intensities for many farms.

    Args:
        records: Farm records (row mappings), e.g. from read_farm_records()
        tier: IPCC tier 1 or 2 (defaults to settings.default_tier)
        boundaries: System boundary (defaults to settings.default_scope)
        max_workers: Worker threads (defaults to settings.max_workers)
        save_detailed_objects: Keep every source result on the entries

    Returns:
        BatchReport with one entry per record, in input order

    Raises:
        ValueError: If records is empty or a path, or tier is not 1 or 2
    """
    if isinstance(records, str | Path):
        raise ValueError("Pass farm records, not a file path; read the file with read_farm_records() first")
    records = list(records)
    if not records:
        raise ValueError("No farm records to process")

    tier = settings.default_tier if tier is None else tier
    if tier not in (1, 2):
        raise ValueError(f"tier must be 1 or 2, got {tier!r}")

    boundary = boundaries if boundaries is not None else set_system_boundaries(settings.default_scope)
    max_workers = max_workers or settings.max_workers

    ids = Counter(scalar_str(r.get("FarmID")) for r in records if isinstance(r, Mapping))
    duplicates = sorted(farm_id for farm_id, count in ids.items() if farm_id and count > 1)
    if duplicates:
        logger.warning("Duplicate FarmIDs in batch: %s", ", ".join(duplicates))

    logger.info("Batch: %d farms, tier %d, boundary %s", len(records), tier, boundary.describe())

    run = partial(process_farm, tier=tier, boundary=boundary, save_detailed_objects=save_detailed_objects)
    rows = range(1, len(records) + 1)
    if max_workers > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            entries = tuple(executor.map(run, records, rows))
    else:
        entries = tuple(run(record, row) for record, row in zip(records, rows))

    summary = BatchSummary(
        n_processed=len(entries),
        n_succeeded=sum(1 for e in entries if e.status == "succeeded"),
        n_failed=sum(1 for e in entries if e.status == "failed"),
        n_skipped=sum(1 for e in entries if e.status == "skipped"),
        boundary=boundary.scope,
        included_sources=tuple(sorted(boundary.include)) if boundary.include is not None else None,
        emission_factors=boundary.factors,
        tier=tier,
    )
    logger.info(
        "Batch done: %d succeeded, %d failed, %d skipped",
        summary.n_succeeded,
        summary.n_failed,
        summary.n_skipped,
    )
    return BatchReport(entries=entries, summary=summary)
