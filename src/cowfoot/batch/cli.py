"""Command-line interface for batch farm footprints.

Reads a farm CSV, runs every farm through the emission pipeline and
writes the farm table, a summary table and optionally a JSON report.
"""

import argparse
import logging
import sys
from pathlib import Path

from cowfoot.accounting.boundaries import set_system_boundaries
from cowfoot.batch.columns import read_farm_records, unknown_columns, write_template
from cowfoot.batch.orchestrator import calc_batch
from cowfoot.batch.report import SOURCE_NAMES, BatchReport
from cowfoot.core import get_output_dir, settings
from cowfoot.core.units import format_co2eq


def print_report(report: BatchReport) -> None:
    """Print a per-farm table and the batch summary."""
    s = report.summary
    print(f"\nBatch: {s.n_processed} farms | boundary: {s.boundary_description} | tier {s.tier}")
    print("=" * 78)
    print(f"{'Farm':<14} {'Status':<10} {'Total':>20} {'kg CO2eq/kg FPCM':>18} {'kg CO2eq/ha':>12}")
    print("-" * 78)
    for entry in report:
        milk = entry.intensities.get("milk_kg_co2eq_per_kg_fpcm")
        area = entry.intensities.get("area_kg_co2eq_per_ha_total")
        milk_str = f"{milk:.3f}" if milk is not None else "n/a"
        area_str = f"{area:,.0f}" if area is not None else "n/a"
        print(f"{entry.farm_id:<14} {entry.status:<10} {format_co2eq(entry.total):>20} {milk_str:>18} {area_str:>12}")
        if entry.error:
            print(f"  ! {entry.error}")
        for warning in entry.warnings:
            print(f"  ~ {warning}")

    print()
    print(f"Succeeded: {s.n_succeeded}  Failed: {s.n_failed}  Skipped: {s.n_skipped}")
    means = [(name, report.mean_emissions(name)) for name in SOURCE_NAMES]
    if any(mean is not None for _, mean in means):
        print("\nMean emissions by source:")
        for name, mean in means:
            if mean is not None:
                print(f"  {name:<10} {format_co2eq(mean)}")


def cmd_batch(args: argparse.Namespace) -> int:
    """Run a batch over a farm CSV."""
    records = read_farm_records(args.input)
    if not records:
        print(f"No farm rows in {args.input}")
        return 1

    extra = unknown_columns(list(records[0]))
    if extra:
        print(f"Ignoring unrecognised columns: {', '.join(extra)}")

    if args.include:
        boundary = set_system_boundaries("partial", include=args.include.split(","))
    else:
        boundary = set_system_boundaries(args.scope)

    report = calc_batch(
        records,
        tier=args.tier,
        boundaries=boundary,
        max_workers=args.workers,
        save_detailed_objects=args.details,
    )
    print_report(report)

    output = Path(args.output) if args.output else get_output_dir() / f"{Path(args.input).stem}_results.csv"
    farms_path, summary_path = report.write_csv(output)
    print(f"\nWrote {farms_path}")
    print(f"Wrote {summary_path}")

    if args.json:
        print(f"Wrote {report.write_json(args.json)}")

    return 0 if report.summary.n_failed == 0 else 2


def cmd_template(args: argparse.Namespace) -> int:
    """Write a blank farm CSV template."""
    path = write_template(args.output, include_examples=args.examples)
    print(f"Wrote template {path}")
    return 0


def cli_main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Dairy farm carbon footprints from a farm CSV",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  cowfoot template farms.csv --examples   Write a template with two example farms
  cowfoot batch farms.csv                 Farm-gate footprint, Tier 2
  cowfoot batch farms.csv --tier 1        Tier 1 default factors
  cowfoot batch farms.csv --include enteric,manure
  cowfoot batch farms.csv --json out.json --details
""",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # batch - Run farms through the pipeline
    batch_parser = subparsers.add_parser("batch", help="Compute footprints for every farm in a CSV")
    batch_parser.add_argument("input", help="Farm CSV (see 'template')")
    batch_parser.add_argument(
        "--scope",
        default=settings.default_scope,
        help=f"Boundary preset: farm_gate, processing, full_cycle, full (default: {settings.default_scope})",
    )
    batch_parser.add_argument("--include", help="Comma-separated sources to include (overrides --scope)")
    batch_parser.add_argument("--tier", type=int, choices=[1, 2], default=settings.default_tier, help="IPCC tier")
    batch_parser.add_argument("--workers", type=int, default=settings.max_workers, help="Worker threads")
    batch_parser.add_argument("--output", help="Farm results CSV (default: reports/<input>_results.csv)")
    batch_parser.add_argument("--json", help="Also write a JSON report to this path")
    batch_parser.add_argument("--details", action="store_true", help="Keep source results in the JSON report")

    # template - Write an input template
    template_parser = subparsers.add_parser("template", help="Write a farm CSV template")
    template_parser.add_argument("output", help="Template path")
    template_parser.add_argument("--examples", action="store_true", help="Include example farms")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    commands = {
        "batch": cmd_batch,
        "template": cmd_template,
    }

    if args.command in commands:
        return commands[args.command](args)
    parser.print_help()
    return 1


def cli() -> None:
    """CLI entry point."""
    sys.exit(cli_main())


if __name__ == "__main__":
    cli()
