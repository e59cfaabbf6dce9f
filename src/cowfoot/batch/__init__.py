"""Batch - many farms through the emission pipeline, with per-farm isolation."""

from cowfoot.batch.columns import (
    TEMPLATE_COLUMNS,
    FarmInputs,
    read_farm_records,
    resolve_farm_inputs,
    write_template,
)
from cowfoot.batch.orchestrator import calc_batch, process_farm
from cowfoot.batch.report import BatchEntry, BatchReport, BatchSummary

__all__ = [
    "TEMPLATE_COLUMNS",
    "FarmInputs",
    "read_farm_records",
    "resolve_farm_inputs",
    "write_template",
    "calc_batch",
    "process_farm",
    "BatchEntry",
    "BatchReport",
    "BatchSummary",
]
