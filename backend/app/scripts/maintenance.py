"""Command line entry-point for the database maintenance routines.

Intended for cron, e.g.::

    0 2 * * *   python -m backend.app.scripts.maintenance daily
    0 3 * * 0   python -m backend.app.scripts.maintenance weekly
    0 4 1 * *   python -m backend.app.scripts.maintenance monthly
"""

from __future__ import annotations

import argparse
import logging
from typing import Optional

from ..config import Settings
from ..context import AppContext
from ..database import session_scope
from ..services.maintenance import MaintenanceReport, MaintenanceService

LOGGER = logging.getLogger(__name__)

ROUTINES = {
    "daily": MaintenanceService.daily_maintenance,
    "weekly": MaintenanceService.weekly_maintenance,
    "monthly": MaintenanceService.monthly_maintenance,
}


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def _parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run school portal database maintenance.")
    parser.add_argument(
        "command",
        choices=[*ROUTINES, "health", "stats", "reset"],
        help="Routine to run.",
    )
    parser.add_argument(
        "--yes",
        action="store_true",
        help="Confirm destructive commands (required by 'reset').",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )
    return parser.parse_args(argv)


def _log_report(report: MaintenanceReport) -> None:
    for name, result in report.steps.items():
        LOGGER.info("%s: %s", name, result)
    for error in report.errors:
        LOGGER.error("%s", error)


def main(argv: Optional[list[str]] = None, *, context: Optional[AppContext] = None) -> int:
    args = _parse_args(argv)
    _configure_logging(args.verbose)

    if args.command == "reset" and not args.yes:
        LOGGER.error("Refusing to reset all data without --yes")
        return 2

    context = context or AppContext.from_settings(Settings.from_env())

    with session_scope(context.session_factory) as session:
        if args.command in ROUTINES:
            report = ROUTINES[args.command](session)
            _log_report(report)
            return 0 if report.succeeded else 1

        if args.command == "health":
            checks = MaintenanceService.system_health_check(session)
            for check in checks:
                LOGGER.info(
                    "%s [%s] %s - %s",
                    check.check_name,
                    check.status,
                    check.details,
                    check.recommendation,
                )
            return 0 if all(check.status == "GOOD" for check in checks) else 1

        if args.command == "stats":
            for metric, value in MaintenanceService.get_system_stats(session).items():
                LOGGER.info("%s: %s", metric, value)
            return 0

        MaintenanceService.reset_demo_data(session)
        return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())
