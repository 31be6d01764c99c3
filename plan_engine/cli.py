#!/usr/bin/env python3
"""
plan-engine command line.

    plan-engine zones --ftp 250
    plan-engine plan --weekly-hours 10 --weeks 12 --start-date 2024-01-01 --goal performance
    plan-engine calendar --output events.json
    plan-engine workouts --level advanced --ftp 280
    plan-engine zwo --out-dir ./exports

Results go to stdout; progress and warnings go to stderr through the logger.
Plans are kept in the configured store directory (paths.store_dir).
"""

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from plan_engine.atomic_write import safe_write_json, safe_write_yaml
from plan_engine.calendar_events import events_to_json
from plan_engine.config_loader import get_config
from plan_engine.constants import EXPERIENCE_LEVELS, GOALS
from plan_engine.hiit_templates import build_workout_templates
from plan_engine.logger import get_logger
from plan_engine.models import UserProfile
from plan_engine.plan_generator import PlanRequest
from plan_engine.plan_service import PlanService
from plan_engine.plan_store import JsonFilePlanStore
from plan_engine.reporting import LoggingNotifier
from plan_engine.zones import resolve_zones


def _service(args) -> PlanService:
    store_dir = Path(args.store_dir) if args.store_dir else get_config().get_store_dir()
    return PlanService(JsonFilePlanStore(store_dir), LoggingNotifier())


def _write_output(data, output: Optional[str]):
    if not output:
        print(json.dumps(data, indent=2))
        return
    path = Path(output)
    if path.suffix in ('.yaml', '.yml'):
        safe_write_yaml(path, data)
    else:
        safe_write_json(path, data)
    get_logger().success(f"Wrote {path}")


def cmd_zones(args) -> int:
    result = resolve_zones(args.ftp)
    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        if result.used_fallback:
            get_logger().warning(f"Invalid FTP {args.ftp!r}, using {result.ftp}W")
        print(f"Power zones for FTP {result.ftp}W")
        for zone in result.zones:
            print(f"  {zone.name.upper()}  {zone.label:<20} {zone.min:>4}-{zone.max:<4} W")
    return 0


def cmd_plan(args) -> int:
    request = PlanRequest(
        weekly_hours=args.weekly_hours,
        duration_weeks=args.weeks,
        start_date=args.start_date,
        goal=args.goal,
        level=args.level,
        ftp=args.ftp,
    )
    result = _service(args).regenerate(request)
    if not result.ok:
        for field_name, message in result.errors.items():
            get_logger().error(f"{field_name}: {message}")
        return 1

    plan = result.plan
    if args.output:
        _write_output(plan.to_dict(), args.output)
    else:
        print(f"{plan.duration_weeks}-week {plan.goal} plan from {plan.start_date} "
              f"(FTP {plan.ftp}W, {plan.weekly_hours}h/week)")
        for week in plan.weeks:
            print(f"  W{week.week_number:02d}  {week.phase.value:<8} {week.week_type.value:<10} TSS {week.tss}")
        print(f"  Total TSS {plan.total_tss}")
    return 0


def cmd_calendar(args) -> int:
    events = _service(args).export_calendar(args.start_date)
    if not events:
        return 1
    if args.output:
        _write_output([e.to_dict() for e in events], args.output)
    else:
        print(events_to_json(events))
    return 0


def cmd_workouts(args) -> int:
    catalog = build_workout_templates(UserProfile(ftp=args.ftp, experience=args.level))
    for fallback in catalog.fallbacks:
        get_logger().warning(f"{fallback.field}: {fallback.value!r} replaced by {fallback.default!r}")
    if args.json:
        print(json.dumps(catalog.to_dict(), indent=2))
        return 0

    print(f"{catalog.level.capitalize()} workouts (FTP {catalog.ftp}W)")
    for template in catalog.templates:
        print(f"  {template.id:<22} {template.name:<24} {template.duration_minutes:>3} min  "
              f"difficulty {template.difficulty}")
    return 0


def cmd_zwo(args) -> int:
    out_dir = Path(args.out_dir) if args.out_dir else get_config().get_export_dir()
    paths = _service(args).export_workouts(out_dir)
    for path in paths:
        print(path)
    return 0 if paths else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='plan-engine',
        description="Periodized cycling training plans: zones, plans, calendar events and ZWO files.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument('--verbose', '-v', action='store_true', help='Debug logging')
    parser.add_argument('--json-logs', action='store_true', help='Structured JSON logs on stderr')
    parser.add_argument('--config', type=str, help='Path to config.yaml')
    parser.add_argument('--log-file', type=str, help='Also write JSON logs to this file')
    subparsers = parser.add_subparsers(dest='command', required=True)

    zones = subparsers.add_parser('zones', help='Power zones for an FTP')
    zones.add_argument('--ftp', type=float, required=True, help='Functional threshold power (W)')
    zones.add_argument('--json', action='store_true', help='JSON output')
    zones.set_defaults(func=cmd_zones)

    plan = subparsers.add_parser('plan', help='Generate and store a training plan')
    plan.add_argument('--weekly-hours', type=float, required=True)
    plan.add_argument('--weeks', type=int, required=True, help='Plan duration in weeks')
    plan.add_argument('--start-date', type=str, required=True, help='YYYY-MM-DD')
    plan.add_argument('--goal', choices=GOALS, default='general')
    plan.add_argument('--level', choices=EXPERIENCE_LEVELS, default='intermediate')
    plan.add_argument('--ftp', type=float, help='FTP in watts (default from config)')
    plan.add_argument('--output', '-o', type=str, help='Write the plan to .json or .yaml')
    plan.add_argument('--store-dir', type=str, help='Override paths.store_dir')
    plan.set_defaults(func=cmd_plan)

    calendar = subparsers.add_parser('calendar', help='Calendar events for the stored plan')
    calendar.add_argument('--start-date', type=str, help="Override the plan's start date")
    calendar.add_argument('--output', '-o', type=str, help='Write events to .json or .yaml')
    calendar.add_argument('--store-dir', type=str, help='Override paths.store_dir')
    calendar.set_defaults(func=cmd_calendar)

    workouts = subparsers.add_parser('workouts', help='HIIT workout catalog for a level')
    workouts.add_argument('--level', default='intermediate')
    workouts.add_argument('--ftp', type=float)
    workouts.add_argument('--json', action='store_true', help='JSON output')
    workouts.set_defaults(func=cmd_workouts)

    zwo = subparsers.add_parser('zwo', help='Export the stored plan as .zwo files')
    zwo.add_argument('--out-dir', type=str, help='Override paths.export_dir')
    zwo.add_argument('--store-dir', type=str, help='Override paths.store_dir')
    zwo.set_defaults(func=cmd_zwo)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    config = get_config()
    if args.config:
        config.reload(Path(args.config))

    logger = get_logger()
    logger.set_level('DEBUG' if args.verbose else config.get('logging.level', 'INFO'))
    if args.json_logs:
        logger.set_json_mode(True)
    if args.log_file:
        logger.add_file_handler(Path(args.log_file))

    return args.func(args)


if __name__ == '__main__':
    sys.exit(main())
