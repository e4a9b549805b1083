"""Command line tools for exporting and maintaining inspection data."""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from room_inspection.analytics.aggregation import current_month_key, export_filename, monthly_stats
from room_inspection.config import AppConfig, load_config
from room_inspection.errors import InspectionError
from room_inspection.io.csv_reader import read_staff_names
from room_inspection.io.results_writer import write_csv_export
from room_inspection.models import InspectionRecord, StaffSlot
from room_inspection.services import InspectionServices
from room_inspection.utils.logging import configure_logging


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="room-inspect", description="Room inspection data tools.")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL (e.g. DEBUG)")
    commands = parser.add_subparsers(dest="command", required=True)

    export = commands.add_parser("export", help="Write all inspections to a CSV file")
    export.add_argument("--out", type=Path, default=None, help="Output path (default: out/<prefix>_<date>.csv)")

    stats = commands.add_parser("stats", help="Print monthly statistics")
    stats.add_argument("--month", default=None, help="Month key YYYY-MM (default: current month)")

    commands.add_parser("report", help="Generate an AI daily quality report")

    seed = commands.add_parser("seed-staff", help="Add staff names from a CSV file to the roster")
    seed.add_argument("csv_path", type=Path)
    seed.add_argument("--column", default="name")
    seed.add_argument("--slot", choices=["bed", "water", "both"], default="both")

    delete = commands.add_parser("delete", help="Delete inspections (irreversible)")
    target = delete.add_mutually_exclusive_group(required=True)
    target.add_argument("--id", dest="record_id")
    target.add_argument("--all", action="store_true")
    delete.add_argument("--passphrase", required=True)

    return parser.parse_args(argv)


async def _snapshot(services: InspectionServices) -> list[InspectionRecord]:
    subscription = services.history.start()
    return await subscription.first(timeout=services.config.store_timeout_seconds)


async def _run(args: argparse.Namespace, config: AppConfig) -> int:
    services = InspectionServices.build(config)
    try:
        identity = await services.start()
        if identity is None:
            print("Error: could not establish a store session.", file=sys.stderr)
            return 1

        if args.command == "export":
            records = await _snapshot(services)
            out = args.out or Path("out") / export_filename(config.export_prefix)
            write_csv_export(out, services.history.export_csv())
            print(f"Exported {len(records)} inspections to {out.resolve()}")

        elif args.command == "stats":
            records = await _snapshot(services)
            month = args.month or current_month_key()
            stats = monthly_stats(records, month)
            print(f"Month: {stats.month_key}")
            print(f"Rooms inspected: {stats.inspected_count}")
            print(f"Total defects: {stats.total_defects}")
            print(f"Failure rate: {stats.failure_rate:.0%}")
            print(f"Rooms with grade A: {stats.severe_count}")
            for rank, (title, count) in enumerate(stats.top_defects, start=1):
                print(f"  {rank}. {title} x{count}")

        elif args.command == "report":
            records = await _snapshot(services)
            print(await services.refinement.daily_report(records))

        elif args.command == "seed-staff":
            slot = None if args.slot == "both" else StaffSlot(args.slot)
            names = list(read_staff_names(args.csv_path, args.column))
            for name in names:
                await services.adapter.add_staff(name, slot)
            print(f"Added {len(names)} names to the {args.slot} roster")

        elif args.command == "delete":
            if args.all:
                count = await services.adapter.delete_all(args.passphrase)
                print(f"Deleted {count} inspections")
            else:
                await services.adapter.delete_one(args.record_id, args.passphrase)
                print(f"Deleted inspection {args.record_id}")
        return 0
    finally:
        await services.aclose()


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    try:
        config = load_config()
    except ValueError as exc:
        sys.exit(f"Error: {exc}")
    configure_logging(args.log_level or config.log_level)

    try:
        code = asyncio.run(_run(args, config))
    except (InspectionError, asyncio.TimeoutError, FileNotFoundError, ValueError) as exc:
        sys.exit(f"Error: {exc}")
    sys.exit(code)


if __name__ == "__main__":
    main()
