#!/usr/bin/env python3
"""
Fleet admin console - command line.

Usage:
    fleetmon-console --email admin@example.com --password secret reports --query bus-12
    fleetmon-console devices
    fleetmon-console triage rep_ab12cd34ef56 RESOLVED --note "Replaced fuse"
    fleetmon-console trips --oldest
    fleetmon-console submit NEEDS_MAINTENANCE --note "Screen flickers"   (driver account)

Credentials default to FLEETMON_EMAIL / FLEETMON_PASSWORD.
"""
import argparse
import asyncio
import logging
import sys

import structlog

from fleetmon_console.api import FleetConsole
from fleetmon_console.config import get_console_settings
from fleetmon_console.errors import ConsoleError
from fleetmon_console.views import (
    NEWEST,
    OLDEST,
    PLACEHOLDER,
    format_date,
    format_datetime,
    format_duration,
    format_status,
    format_time_range,
    monitoring_view,
    status_tone,
    trip_history,
)

logger = logging.getLogger("fleetmon_console")


def build_parser() -> argparse.ArgumentParser:
    settings = get_console_settings()
    parser = argparse.ArgumentParser(
        description="Fleet admin console",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--api-url", default=settings.api_url, help="Fleet API URL")
    parser.add_argument("--email", default=settings.email, help="Login email")
    parser.add_argument("--password", default=settings.password, help="Login password")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")

    commands = parser.add_subparsers(dest="command", required=True)

    devices = commands.add_parser("devices", help="List IoT devices")
    devices.add_argument("--query", default="", help="Search text")
    devices.add_argument("--oldest", action="store_true", help="Oldest first")

    reports = commands.add_parser("reports", help="List status reports and devices")
    reports.add_argument("--query", default="", help="Search text")
    reports.add_argument("--oldest", action="store_true", help="Oldest first")

    triage = commands.add_parser("triage", help="Set a report's admin status")
    triage.add_argument("report_id")
    triage.add_argument("admin_status", help="e.g. PENDING, NEEDS_CHECK, IN_PROGRESS, RESOLVED, OK")
    triage.add_argument("--note")

    trips = commands.add_parser("trips", help="Completed trip history")
    trips.add_argument("--query", default="", help="Search text")
    trips.add_argument("--oldest", action="store_true", help="Oldest first")

    submit = commands.add_parser("submit", help="Submit a device condition report (driver)")
    submit.add_argument("status", help="WORKING | NEEDS_MAINTENANCE | NOT_WORKING")
    submit.add_argument("--note")

    return parser


def print_monitoring(items) -> None:
    if not items:
        print("No IoT records.")
        return
    for item in items:
        line = (
            f"{item.type:<7} {item.badge:<18} {status_tone(item.badge):<8} "
            f"{format_datetime(item.date):<17} {item.title}"
        )
        if item.type == "REPORT":
            line += f"  [{item.admin_status}]  ({item.id})"
        print(line)
        print(f"        {item.meta}")


def print_trips(trips) -> None:
    if not trips:
        print("No completed trips.")
        return
    for trip in trips:
        print(
            f"{format_date(trip.get('startedAt')):<13} "
            f"{format_time_range(trip.get('startedAt'), trip.get('endedAt')):<15} "
            f"{format_duration(trip.get('startedAt'), trip.get('endedAt')):<9} "
            f"{format_status(trip.get('status')):<10} "
            f"{trip.get('originLabel') or PLACEHOLDER} -> {trip.get('destLabel') or PLACEHOLDER}  "
            f"Bus {trip.get('busNumber') or PLACEHOLDER} · {trip.get('driverName') or 'Unknown driver'}"
        )


def result_message(result, default: str) -> str:
    """The API's {"message"} when the body carries one, else `default`."""
    message = result.get("message") if isinstance(result, dict) else None
    return message if isinstance(message, str) and message else default


async def run(args: argparse.Namespace) -> int:
    order = OLDEST if getattr(args, "oldest", False) else NEWEST

    async with FleetConsole(args.api_url) as console:
        if args.email and args.password:
            await console.login(args.email, args.password)

        if args.command == "devices":
            devices = await console.list_devices()
            print_monitoring(monitoring_view(devices, [], args.query, order))
        elif args.command == "reports":
            # Both calls settle before the client closes; the first failure wins
            results = await asyncio.gather(
                console.list_devices(),
                console.list_status_reports(),
                return_exceptions=True,
            )
            for outcome in results:
                if isinstance(outcome, BaseException):
                    raise outcome
            devices, reports = results
            print_monitoring(monitoring_view(devices, reports, args.query, order))
        elif args.command == "triage":
            result = await console.update_status_report(args.report_id, args.admin_status, args.note)
            print(result_message(result, "Status updated."))
        elif args.command == "trips":
            trips = await console.list_trips()
            print_trips(trip_history(trips, args.query, order))
        elif args.command == "submit":
            result = await console.submit_status_report(args.status, args.note)
            print(result_message(result, "Report submitted."))
    return 0


def configure_logging(verbose: bool) -> None:
    """stdlib logging to stderr; structlog events from the library go through it."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else get_console_settings().log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_log_level,
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    try:
        return asyncio.run(run(args))
    except ConsoleError as exc:
        logger.debug("Command failed", exc_info=True)
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    sys.exit(main())
