"""Herd analytics CLI.

Reads a herd snapshot exported by the sync layer and prints the derived
views.

Usage:
    goatherd summary
    goatherd classify [--json]
    goatherd growth ID [--json]
    goatherd lactation ID [--json]
    goatherd compare ID --type herd [--lactation N] [--max-del D]
    goatherd gdp
    goatherd drying

Common options:
    --snapshot PATH   Snapshot JSON (default: GOATHERD_SNAPSHOT_PATH or .cache/herd.json)
    --date YYYY-MM-DD Evaluate as of this date (default: today, UTC)
"""

import argparse
import json
import logging
import sys
from dataclasses import asdict, is_dataclass
from datetime import date
from enum import Enum
from pathlib import Path

from goatherd.analysis.cohorts import ComparisonRequest, ComparisonType, compare
from goatherd.analysis.growth_report import analyze_gdp, analyze_growth
from goatherd.analysis.stats import PerformanceClass
from goatherd.core.config import settings
from goatherd.core.dates import format_age, today_utc
from goatherd.core.units import format_gdp, format_weight, g_per_day_to_kg_per_day
from goatherd.data.snapshot import HerdIndex, HerdSnapshot, SnapshotError, load_snapshot
from goatherd.growth.milestones import growth_status
from goatherd.growth.series import calculate_gdp, weighing_trend
from goatherd.growth.targets import target_weight_at_age
from goatherd.lactation.cycles import (
    animal_indicators,
    build_lactation_cycles,
    current_days_in_milk,
    doe_composition,
    drying_candidates,
    parturition_intervals,
)
from goatherd.lifecycle.classifier import Category, category_counts, classify_herd

logger = logging.getLogger(__name__)


class UnknownAnimalError(Exception):
    """Raised when an animal id is not in the snapshot."""

    pass


def _json_default(value: object) -> object:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, date):
        return value.isoformat()
    if is_dataclass(value):
        return asdict(value)
    raise TypeError(f"Not JSON serializable: {type(value).__name__}")


def print_json(data: object) -> None:
    if is_dataclass(data):
        data = asdict(data)
    print(json.dumps(data, indent=2, default=_json_default, ensure_ascii=False))


def _optional(value: object) -> str:
    return "N/A" if value is None else str(value)


def _days(value: float | None) -> str:
    return "N/A" if value is None else f"{value:.0f} days"


def _get_animal(snapshot: HerdSnapshot, animal_id: str):
    animal = HerdIndex.for_snapshot(snapshot).animals_by_id.get(animal_id)
    if animal is None:
        raise UnknownAnimalError(f"Animal not found: {animal_id}")
    return animal


# =============================================================================
# Commands
# =============================================================================


def cmd_summary(snapshot: HerdSnapshot, as_of: date) -> None:
    categories = classify_herd(snapshot, reference_date=as_of)
    counts = category_counts(categories)
    growth = analyze_growth(snapshot, reference_date=as_of)
    drying = drying_candidates(
        snapshot.animals, snapshot.parturitions, snapshot.milk_weighings, snapshot.config, as_of
    )
    index = HerdIndex.for_snapshot(snapshot)
    does = [index.animals_by_id[i] for i, category in categories.items() if category is Category.DOE]
    composition = doe_composition(does, snapshot.parturitions, as_of)

    print(f"{snapshot.config.farm_name} - herd summary as of {as_of}")
    print("-" * 50)
    print(f"Animals:        {len(categories)}")
    for category in Category:
        print(f"  {category.value:<12} {counts[category]:>5}")
    print()
    print(f"Does:               {composition.total}")
    print(f"  In milk:          {composition.in_milk}")
    print(f"  Dry:              {composition.dry}")
    print(f"  Pregnant:         {composition.pregnant}")
    print(f"  Empty:            {composition.empty}")
    print(f"  In service:       {composition.in_service}")
    print()
    print(f"Growing animals:    {growth.target_kpis.total_animals}")
    print(f"  On/above target:  {growth.target_kpis.on_target_pct + growth.target_kpis.superior_pct:.0f}%")
    print(f"  Alerts:           {len(growth.alert_list)}")
    print(f"  Weaning candidates: {len(growth.weaning_candidates)}")
    print(f"  Approaching service: {len(growth.approaching_service)}")
    print(f"  Avg GDP:          {format_gdp(g_per_day_to_kg_per_day(growth.milestone_kpis.avg_gdp_g_day))}")
    print(f"Drying candidates:  {len(drying)}")


def cmd_classify(snapshot: HerdSnapshot, as_of: date, as_json: bool) -> None:
    categories = classify_herd(snapshot, reference_date=as_of)
    index = HerdIndex.for_snapshot(snapshot)

    if as_json:
        print_json({animal_id: category.value for animal_id, category in categories.items()})
        return

    for animal_id, category in categories.items():
        animal = index.animals_by_id[animal_id]
        age = format_age(animal.birth_date, as_of)
        stored = animal.lifecycle_stage or "-"
        print(f"{animal_id:<15} {category.value:<12} {age:<20} (stored: {stored})")


def cmd_growth(snapshot: HerdSnapshot, as_of: date, animal_id: str, as_json: bool) -> None:
    animal = _get_animal(snapshot, animal_id)
    index = HerdIndex.for_snapshot(snapshot)
    weighings = index.body_weighings_for(animal_id)

    status = growth_status(animal, weighings, snapshot.config, index.events_for(animal_id), as_of)
    gdp = calculate_gdp(animal.birth_date, animal.birth_weight, weighings)
    trend = weighing_trend(weighings)

    if as_json:
        print_json({"animal_id": animal_id, "status": status, "gdp": gdp, "trend": trend})
        return

    milestones = status.milestone_status
    print(f"Growth: {animal_id} ({animal.sex.value}, {format_age(animal.birth_date, as_of)})")
    print("-" * 50)
    print(f"Current weight:  {format_weight(status.current_weight)} ({status.current_weight_date or 'n/a'})")
    if animal.birth_date is not None:
        age = (as_of - animal.birth_date).days
        print(f"Target today:    {format_weight(target_weight_at_age(age, animal.sex, snapshot.config))}")
    print(f"GDP overall:     {format_gdp(gdp.overall)}")
    print(f"GDP recent:      {format_gdp(gdp.recent)}")
    print(f"Trend:           {trend.trend.value} ({trend.difference:+.2f} kg)")
    print()
    print("Milestones:")
    print(f"  Weaning:   {milestones.weaning.value}")
    print(f"  90 days:   {milestones.d90.value}")
    print(f"  180 days:  {milestones.d180.value}")
    print(f"  270 days:  {milestones.d270.value}")
    print(f"  Service:   {milestones.service.value}")
    print()
    print(f"Ready for weaning: {'yes' if status.is_ready_for_weaning else 'no'}")
    print(f"Ready for service: {'yes' if status.is_ready_for_service else 'no'}")


def cmd_lactation(snapshot: HerdSnapshot, as_of: date, animal_id: str, as_json: bool) -> None:
    animal = _get_animal(snapshot, animal_id)
    index = HerdIndex.for_snapshot(snapshot)
    milk = index.milk_weighings_for(animal_id)

    cycles = build_lactation_cycles(index.parturitions_for(animal_id), milk, as_of)
    intervals = parturition_intervals(index.parturitions_for(animal_id))
    indicators = animal_indicators(animal, index.parturitions_for(animal_id))

    if as_json:
        print_json(
            {"animal_id": animal_id, "cycles": cycles, "intervals": intervals, "indicators": indicators}
        )
        return

    if not cycles:
        print(f"No parturitions recorded for {animal_id}")
        return

    last_weighing = milk[-1].date if milk else None
    print(f"Lactations: {animal_id}")
    print("-" * 70)
    print(f"{'#':<3} {'Parturition':<12} {'Status':<10} {'DEL':>5} {'Avg kg':>8} {'Peak kg':>8} {'@DEL':>5} {'Days':>5}")
    for number, cycle in enumerate(cycles, start=1):
        dim = current_days_in_milk(cycle, as_of, last_weighing) if number == len(cycles) else None
        print(
            f"{number:<3} {cycle.parturition_date.isoformat():<12} {cycle.status.value:<10} "
            f"{dim if dim is not None else '-':>5} {cycle.average_production:>8.2f} "
            f"{cycle.peak_production.kg:>8.2f} {cycle.peak_production.del_:>5} {cycle.total_days:>5}"
        )

    if intervals:
        print()
        print("Parturition intervals:")
        for interval in intervals:
            print(f"  {interval.period}: {interval.days} days")

    print()
    print("Indicators:")
    print(f"  Parturitions:          {_optional(indicators.parturition_count)}")
    print(f"  Age at first kidding:  {_days(indicators.age_at_first_kidding_days)}")
    print(f"  Mean kidding interval: {_days(indicators.mean_parturition_interval_days)}")
    print(f"  Mean lactation length: {_days(indicators.mean_lactation_length_days)}")
    print(f"  Mean dry period:       {_days(indicators.mean_dry_period_days)}")


def cmd_compare(
    snapshot: HerdSnapshot,
    animal_id: str,
    comparison: str,
    lactation: int | None,
    max_del: int | None,
) -> None:
    animal = _get_animal(snapshot, animal_id)
    request = ComparisonRequest(
        type=ComparisonType(comparison),
        animal=animal,
        specific_lactation_index=lactation - 1 if lactation else None,
        max_del=max_del,
    )
    result = compare(request, snapshot.animals, snapshot.parturitions, snapshot.milk_weighings)

    print(f"{result.name}: {len(result.curve)} points")
    if result.average_rest_interval is not None:
        print(f"Average rest interval: {result.average_rest_interval:.0f} days")
    for point in result.curve:
        print(f"  DEL {point.del_:>4}  {point.kg:6.2f} kg")


def cmd_gdp(snapshot: HerdSnapshot, as_of: date) -> None:
    analysis = analyze_gdp(snapshot, reference_date=as_of)
    stats = analysis.stats

    if not analysis.animals:
        print("No growing animals with a positive daily gain")
        return

    print(f"GDP analysis ({stats.count} animals)")
    print("-" * 50)
    print(f"Mean: {format_gdp(g_per_day_to_kg_per_day(stats.mean))}")
    print(f"Std:  {format_gdp(g_per_day_to_kg_per_day(stats.std_dev))}")
    for cls in PerformanceClass:
        print(f"  {cls.value:<12} {analysis.distribution[cls]:>4}")
    print()
    for row in analysis.animals:
        gdp = format_gdp(g_per_day_to_kg_per_day(row.gdp_g_day))
        print(f"{row.animal_id:<15} {row.category.value:<12} {gdp:>12}  {row.classification.value}")


def cmd_drying(snapshot: HerdSnapshot, as_of: date) -> None:
    candidates = drying_candidates(
        snapshot.animals, snapshot.parturitions, snapshot.milk_weighings, snapshot.config, as_of
    )
    if not candidates:
        print("No drying candidates")
        return
    for candidate in candidates:
        reasons = ", ".join(r.value for r in candidate.reasons)
        dim = f"{candidate.days_in_milk} DEL" if candidate.days_in_milk is not None else ""
        print(f"{candidate.animal_id:<15} {dim:<10} {reasons}")


# =============================================================================
# Entry point
# =============================================================================


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Goat herd lifecycle, growth and lactation analytics")
    parser.add_argument("--snapshot", type=Path, help="Herd snapshot JSON file")
    parser.add_argument("--date", type=date.fromisoformat, help="Evaluate as of this date (YYYY-MM-DD)")
    subparsers = parser.add_subparsers(dest="command", help="Command")

    subparsers.add_parser("summary", help="Show herd summary")

    classify_parser = subparsers.add_parser("classify", help="Classify every animal")
    classify_parser.add_argument("--json", action="store_true", help="Output as JSON")

    growth_parser = subparsers.add_parser("growth", help="Growth status and milestones for one animal")
    growth_parser.add_argument("id", help="Animal ID")
    growth_parser.add_argument("--json", action="store_true", help="Output as JSON")

    lactation_parser = subparsers.add_parser("lactation", help="Lactation cycles for one doe")
    lactation_parser.add_argument("id", help="Animal ID")
    lactation_parser.add_argument("--json", action="store_true", help="Output as JSON")

    compare_parser = subparsers.add_parser("compare", help="Comparison lactation curve")
    compare_parser.add_argument("id", help="Animal ID")
    compare_parser.add_argument(
        "--type",
        required=True,
        choices=[t.value for t in ComparisonType],
        help="Cohort to compare against",
    )
    compare_parser.add_argument("--lactation", type=int, help="Lactation number (1 = first), for --type lactation")
    compare_parser.add_argument("--max-del", type=int, help="Cut the curve at this DEL")

    subparsers.add_parser("gdp", help="Daily gain distribution of growing animals")
    subparsers.add_parser("drying", help="Does to start drying off")

    return parser


def cli_main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns the process exit status."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=settings.log_level.upper())

    if not args.command:
        parser.print_help()
        return 1

    as_of = args.date or today_utc()

    try:
        snapshot = load_snapshot(args.snapshot)

        if args.command == "summary":
            cmd_summary(snapshot, as_of)
        elif args.command == "classify":
            cmd_classify(snapshot, as_of, args.json)
        elif args.command == "growth":
            cmd_growth(snapshot, as_of, args.id, args.json)
        elif args.command == "lactation":
            cmd_lactation(snapshot, as_of, args.id, args.json)
        elif args.command == "compare":
            cmd_compare(snapshot, args.id, args.type, args.lactation, args.max_del)
        elif args.command == "gdp":
            cmd_gdp(snapshot, as_of)
        elif args.command == "drying":
            cmd_drying(snapshot, as_of)
    except (SnapshotError, UnknownAnimalError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


def cli() -> None:
    """Console script entry point."""
    sys.exit(cli_main())


if __name__ == "__main__":
    cli()
