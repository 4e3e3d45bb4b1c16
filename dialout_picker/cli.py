"""Command line interface for listing call targets and dialing them out."""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Iterable, List, Optional

from .catalog import load_catalog
from .config import ConfigurationError, load_settings
from .factory import build_dispatcher
from .hosts import EchoDialer
from .io import write_outcomes
from .models import CallTarget, DialOverrides, DispatchOutcome, DispatchTally, OutcomeStatus, Protocol, Role
from .sources import build_fetcher
from .ui.state import format_outcome

LOGGER = logging.getLogger(__name__)


def build_parser(prog: Optional[str] = None) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=prog,
        description="Dial pre-configured call targets into an active conference",
    )
    parser.add_argument(
        "destinations",
        nargs="*",
        help="Destinations to dial, in order. Without any, matching targets are listed",
    )
    parser.add_argument("--config", help="Path to the picker configuration file (YAML or JSON)")
    parser.add_argument("--source", help="Path or URL of the call target list (overrides the configuration)")
    parser.add_argument("--search", default="", help="Only consider targets whose label or destination contains this text")
    parser.add_argument(
        "--select-all",
        action="store_true",
        help="Dial every target matching --search after any explicit destinations",
    )
    parser.add_argument(
        "--role",
        type=str.upper,
        choices=[role.value for role in Role],
        help=(
            "Join role for targets defined without a role. Rows in the target list always "
            "carry one (GUEST when blank), so it only applies to targets constructed without one"
        ),
    )
    parser.add_argument(
        "--protocol",
        type=str.lower,
        choices=[protocol.value for protocol in Protocol],
        default=Protocol.AUTO.value,
        help="Protocol for bare destinations whose target does not specify one",
    )
    parser.add_argument("--display-name", help="Display name shown for every dialled participant")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Log dial requests instead of sending them to the configured dialer",
    )
    parser.add_argument("--report", help="Write the dispatch outcomes to this CSV or Excel file")
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (e.g. DEBUG, INFO, WARNING)",
    )
    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO))

    try:
        settings = load_settings(args.config)
    except ConfigurationError as exc:
        LOGGER.error("%s", exc)
        return 2
    if args.source:
        settings.source = args.source

    fetcher = build_fetcher(settings.source, timeout=settings.fetch_timeout_seconds)
    catalog = load_catalog(fetcher, settings.source, fallback=settings.fallback_targets)
    matches = catalog.search(args.search)

    destinations = _unique(list(args.destinations) + ([target.destination for target in matches] if args.select_all else []))
    if not destinations:
        print_targets(matches)
        return 0

    try:
        dispatcher = build_dispatcher(settings, EchoDialer() if args.dry_run else None)
    except (ConfigurationError, ImportError) as exc:
        LOGGER.error("%s", exc)
        return 2

    overrides = DialOverrides(role=args.role, protocol=args.protocol, display_name=args.display_name)
    try:
        outcomes = dispatcher.dispatch_all(destinations, catalog, overrides, on_outcome=_print_outcome)
    finally:
        close = getattr(dispatcher.host, "close", None)
        if callable(close):
            close()

    tally = DispatchTally()
    for outcome in outcomes:
        tally.record(outcome.status)
    print(f"Done. {tally.summary()}")

    if args.report:
        report_path = write_outcomes(args.report, outcomes)
        LOGGER.info("Dispatch report written to %s", Path(report_path).resolve())
    return 1 if tally.fail else 0


def print_targets(targets: Iterable[CallTarget]) -> None:
    targets = list(targets)
    if not targets:
        print("No matches")
        return
    for target in targets:
        role = target.role.value if target.role else "-"
        print(f"{target.label}\t{target.destination}\t{target.protocol.value}\t{role}")


def _print_outcome(outcome: DispatchOutcome, tally: DispatchTally) -> None:
    stream = sys.stdout if outcome.status is not OutcomeStatus.FAIL else sys.stderr
    print(format_outcome(outcome), file=stream)


def _unique(destinations: List[str]) -> List[str]:
    return list(dict.fromkeys(destination for destination in destinations if destination))


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    sys.exit(main())
