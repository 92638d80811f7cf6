"""Command-line interface for the capacity planner."""

import argparse
import logging
import sys
from datetime import date
from typing import Optional

from capplanner.capacity.aggregation import over_allocations, range_stats
from capplanner.capacity.resizer import resize
from capplanner.domain.models import (
    Assignment,
    Person,
    PlanningPeriod,
    Project,
    Schedule,
    Week,
)
from capplanner.output.csv_exporter import CSVExporter
from capplanner.output.pdf_generator import PDFGenerator
from capplanner.output.text_report import TextReportGenerator
from capplanner.planning.fr_rotation import (
    FirstResponderPlanner,
    RotationConfig,
    SolverType,
)
from capplanner.serialization.json_codec import (
    ScheduleFormatError,
    dumps_schedule,
    load_schedule,
    save_schedule,
)
from capplanner.serialization.share_link import build_share_url, decode_share_token
from capplanner.validation.validator import ScheduleValidator

DEFAULT_BASE_URL = "http://localhost:3000"


def create_sample_schedule() -> Schedule:
    """Create the sample planning document.

    Six weeks starting Monday 24 November 2025 (the third week has four
    working days), three people with a few holidays, and one project.
    """
    weeks = tuple(
        Week(id=f"W{n}", name=f"Week {n}", working_days=4 if n == 3 else 5)
        for n in range(1, 7)
    )
    people = (
        Person(id=1, name="Alice"),
        Person(id=2, name="Bob"),
        Person(id=3, name="Charlie"),
    )
    holidays = {(p.id, w.id): 0 for p in people for w in weeks}
    holidays.update({(1, "W2"): 2, (1, "W5"): 5, (3, "W4"): 3})

    project = Project(
        id=1,
        name="API Migration",
        start_week="W1",
        end_week="W3",
        assignments=(
            Assignment(person_id=1, days_per_week=3, start_week="W1", end_week="W3"),
            Assignment(person_id=2, days_per_week=4, start_week="W1", end_week="W3"),
        ),
    )

    return Schedule(
        people=people,
        weeks=weeks,
        planning_period=PlanningPeriod(start_date=date(2025, 11, 24), number_of_weeks=6),
        holidays=holidays,
        fr_schedule={},
        fr_capacity_days=3,
        projects=(project,),
        name="Sample Plan",
    )


def print_overview(schedule: Schedule) -> None:
    """Print a short overview of a schedule."""
    stats = range_stats(schedule)
    print(f"  Weeks: {len(schedule.weeks)} from {schedule.planning_period.start_date}")
    print(f"  People: {len(schedule.people)}, projects: {len(schedule.projects)}")
    print(f"  Capacity: {stats.total_capacity:.1f} days, "
          f"allocated: {stats.total_allocated:.1f} days "
          f"({stats.utilization_percent:.0f}%)")

    excess = over_allocations(schedule)
    if excess:
        print(f"  Over-allocated person-weeks: {len(excess)}")
        for person_id, week_id, days in excess[:5]:
            person = schedule.get_person(person_id)
            name = person.name if person else f"#{person_id}"
            print(f"    - {name} in {week_id}: {days:.1f} day(s) over")
        if len(excess) > 5:
            print(f"    ... and {len(excess) - 5} more")


def write_or_print(schedule: Schedule, output_path: Optional[str]) -> None:
    if output_path:
        save_schedule(schedule, output_path)
        print(f"  Saved to {output_path}")
    else:
        print(dumps_schedule(schedule))


def run_demo(output_path: Optional[str] = None) -> None:
    """Build the sample schedule and optionally save it."""
    print("Creating sample capacity plan...")
    schedule = create_sample_schedule()
    print_overview(schedule)
    if output_path:
        save_schedule(schedule, output_path)
        print(f"\nSaved sample plan to {output_path}")


def run_summary(path: str, start: Optional[str], end: Optional[str]) -> None:
    schedule = load_schedule(path)
    print(TextReportGenerator().generate_to_string(schedule, start, end), end="")


def run_validate(path: str) -> bool:
    """Validate a schedule file and print the result."""
    schedule = load_schedule(path)
    result = ScheduleValidator().validate(schedule)

    if result.is_valid:
        print("Validation: PASSED")
    else:
        print(f"Validation: FAILED ({len(result.errors)} errors)")
        for error in result.errors[:10]:
            print(f"  - {error}")
        if len(result.errors) > 10:
            print(f"  ... and {len(result.errors) - 10} more errors")

    if result.warnings:
        print(f"Warnings ({len(result.warnings)}):")
        for warning in result.warnings:
            print(f"  - {warning}")
    return result.is_valid


def run_resize(path: str, weeks: int, strict: bool, output_path: Optional[str]) -> None:
    schedule = load_schedule(path)
    resized = resize(schedule, weeks, clamp_ranges=strict)
    print(f"Resized from {len(schedule.weeks)} to {len(resized.weeks)} weeks", file=sys.stderr)
    write_or_print(resized, output_path)


def run_export_csv(path: str, output_path: str) -> None:
    schedule = load_schedule(path)
    CSVExporter().generate(schedule, output_path)
    print(f"CSV written to {output_path}")


def run_export_pdf(path: str, output_path: str) -> None:
    schedule = load_schedule(path)
    print(f"Generating PDF: {output_path}")
    PDFGenerator().generate(schedule, output_path)
    print("  PDF created successfully!")


def run_share(path: str, base_url: str) -> None:
    schedule = load_schedule(path)
    print(build_share_url(base_url, schedule))


def run_open_link(link: str, output_path: Optional[str]) -> None:
    schedule = decode_share_token(link)
    write_or_print(schedule, output_path)


def run_rotate_fr(
    path: str,
    solver: str,
    time_limit: float,
    replace_existing: bool,
    avoid_consecutive: bool,
    output_path: Optional[str],
) -> None:
    """Plan first-responder duty and print the chosen holders."""
    schedule = load_schedule(path)
    config = RotationConfig(
        solver_type=SolverType(solver),
        time_limit_seconds=time_limit,
        keep_existing=not replace_existing,
        avoid_consecutive=avoid_consecutive,
    )
    result = FirstResponderPlanner(config).plan(schedule)

    print(f"First-responder rotation ({result.solver_used}, {result.status}, "
          f"{result.solve_time_seconds:.2f}s)")
    for week in schedule.weeks:
        if week.id in result.assignments:
            person = schedule.get_person(result.assignments[week.id])
            print(f"  {week.name}: {person.name if person else result.assignments[week.id]}")
    if result.unassigned_weeks:
        print(f"  No eligible person: {', '.join(result.unassigned_weeks)}")

    if output_path:
        save_schedule(result.schedule, output_path)
        print(f"  Saved to {output_path}")


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for CLI."""
    parser = argparse.ArgumentParser(
        description="capplanner - Team Capacity Planning Tool",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s demo -o plan.json              Write the sample plan
  %(prog)s summary plan.json              Print a capacity report
  %(prog)s summary plan.json --start W2 --end W4
  %(prog)s resize plan.json 8 -o plan.json
  %(prog)s export-pdf plan.json -o plan.pdf
  %(prog)s share plan.json                Print a share link
  %(prog)s rotate-fr plan.json --solver cpsat -o plan.json
        """,
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    demo_parser = subparsers.add_parser("demo", help="Create the sample plan")
    demo_parser.add_argument("--output", "-o", type=str, help="Output JSON file path")

    summary_parser = subparsers.add_parser("summary", help="Print a capacity report")
    summary_parser.add_argument("file", help="Plan JSON file")
    summary_parser.add_argument("--start", type=str, help="First week id of the range")
    summary_parser.add_argument("--end", type=str, help="Last week id of the range")

    validate_parser = subparsers.add_parser("validate", help="Check a plan for problems")
    validate_parser.add_argument("file", help="Plan JSON file")

    resize_parser = subparsers.add_parser("resize", help="Change the number of weeks")
    resize_parser.add_argument("file", help="Plan JSON file")
    resize_parser.add_argument("weeks", type=int, help="New number of weeks")
    resize_parser.add_argument(
        "--strict",
        action="store_true",
        help="Clamp project and assignment ranges to the remaining weeks",
    )
    resize_parser.add_argument("--output", "-o", type=str, help="Output JSON file path")

    csv_parser = subparsers.add_parser("export-csv", help="Export capacity as CSV")
    csv_parser.add_argument("file", help="Plan JSON file")
    csv_parser.add_argument("--output", "-o", type=str, required=True, help="Output CSV path")

    pdf_parser = subparsers.add_parser("export-pdf", help="Export capacity as PDF")
    pdf_parser.add_argument("file", help="Plan JSON file")
    pdf_parser.add_argument("--output", "-o", type=str, required=True, help="Output PDF path")

    share_parser = subparsers.add_parser("share", help="Print a share link for a plan")
    share_parser.add_argument("file", help="Plan JSON file")
    share_parser.add_argument(
        "--base-url",
        type=str,
        default=DEFAULT_BASE_URL,
        help=f"Base URL of the viewer (default: {DEFAULT_BASE_URL})",
    )

    open_parser = subparsers.add_parser("open-link", help="Decode a share link")
    open_parser.add_argument("link", help="Share URL or bare token")
    open_parser.add_argument("--output", "-o", type=str, help="Output JSON file path")

    rotate_parser = subparsers.add_parser("rotate-fr", help="Plan first-responder duty")
    rotate_parser.add_argument("file", help="Plan JSON file")
    rotate_parser.add_argument(
        "--solver", "-s",
        type=str,
        default="hybrid",
        choices=["heuristic", "cpsat", "hybrid"],
        help="Solver type (default: hybrid)",
    )
    rotate_parser.add_argument(
        "--time-limit", "-t",
        type=float,
        default=10.0,
        help="Solver time limit in seconds (default: 10)",
    )
    rotate_parser.add_argument(
        "--replace",
        action="store_true",
        help="Re-plan every week instead of only weeks without a first responder",
    )
    rotate_parser.add_argument(
        "--avoid-consecutive",
        action="store_true",
        help="Avoid back-to-back weeks for the same person",
    )
    rotate_parser.add_argument("--output", "-o", type=str, help="Output JSON file path")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.command == "demo":
            run_demo(args.output)
        elif args.command == "summary":
            run_summary(args.file, args.start, args.end)
        elif args.command == "validate":
            return 0 if run_validate(args.file) else 1
        elif args.command == "resize":
            run_resize(args.file, args.weeks, args.strict, args.output)
        elif args.command == "export-csv":
            run_export_csv(args.file, args.output)
        elif args.command == "export-pdf":
            run_export_pdf(args.file, args.output)
        elif args.command == "share":
            run_share(args.file, args.base_url)
        elif args.command == "open-link":
            run_open_link(args.link, args.output)
        elif args.command == "rotate-fr":
            run_rotate_fr(
                args.file,
                args.solver,
                args.time_limit,
                args.replace,
                args.avoid_consecutive,
                args.output,
            )
        else:
            parser.print_help()
            return 1
    except (ScheduleFormatError, ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
