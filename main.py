#!/usr/bin/env python3
"""
State Probe — Entry Point
=========================

Fetches one page and reports whether it looks Stateful, Stateless, or
neither.

Usage:
    python main.py --site https://example.com
    python main.py --site https://example.com --verbose   # per-detector breakdown
    python main.py --site https://example.com --json      # full report as JSON
"""

from __future__ import annotations

import argparse
import logging
import sys

from state_probe.config import Settings
from state_probe.engine import ClassificationEngine
from state_probe.exceptions import ConfigurationError, FetchError
from state_probe.fetcher import fetch_document
from state_probe.models import BatteryResult, Classification, ClassificationReport

# ─── Load .env if available (optional dependency) ────────────────────
try:
    from dotenv import load_dotenv

    load_dotenv()
except ImportError:
    pass


# ─── ANSI Color Constants ───────────────────────────────────────────

_RED = "\033[91m"
_YELLOW = "\033[93m"
_GREEN = "\033[92m"
_CYAN = "\033[96m"
_DIM = "\033[2m"
_BOLD = "\033[1m"
_RESET = "\033[0m"
_WIDTH = 72

_LABELS = {
    Classification.STATEFUL: (_YELLOW, "Stateful"),
    Classification.STATELESS: (_GREEN, "Stateless"),
    Classification.UNDETERMINED: (_DIM, "Not sure"),
}


# ─── Pretty Printer ─────────────────────────────────────────────────


def _print_battery(result: BatteryResult) -> None:
    """Print one battery's signals and its vote."""
    verdict = f"{_GREEN}PASS{_RESET}" if result.verdict else f"{_DIM}fail{_RESET}"
    print(
        f"  {_BOLD}{result.battery.capitalize()} checks{_RESET}: "
        f"{result.true_count}/{len(result.signals)} "
        f"(need {result.threshold}) {verdict}"
    )
    for signal in result.signals:
        mark = f"{_CYAN}x{_RESET}" if signal.fired else f"{_DIM}-{_RESET}"
        print(f"    [{mark}] {signal.detector}")


def print_report(url: str, report: ClassificationReport, verbose: bool = False) -> None:
    """Print the classification, with the detector breakdown when verbose."""
    color, label = _LABELS[report.classification]

    if verbose:
        print(f"\n{'=' * _WIDTH}")
        print(f"{_BOLD}{_CYAN}  STATE PROBE REPORT{_RESET}")
        print(f"{'=' * _WIDTH}")
        print(f"  Site:        {url}")
        print(f"  Body Hash:   {_DIM}{report.body_sha256[:16]}...{_RESET}")
        print(f"  Body Length: {report.body_length}")
        print(f"{'─' * _WIDTH}")
        _print_battery(report.stateful)
        _print_battery(report.stateless)
        print(f"{'=' * _WIDTH}")

    print(f"\nThe website {url} is {color}{_BOLD}{label}{_RESET}")


# ─── Main ────────────────────────────────────────────────────────────


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="state-probe",
        description="Classify a web page as stateful, stateless, or undetermined.",
    )
    parser.add_argument("--site", default="", help="the site to check")
    parser.add_argument("--verbose", action="store_true", help="show every detector")
    parser.add_argument("--json", action="store_true", help="print the report as JSON")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Fetch, classify and print.  Returns the process exit code."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not args.site:
        print("Please provide a site to check using the --site flag", file=sys.stderr)
        return 2

    try:
        settings = Settings.from_env()
    except ConfigurationError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        for key, msg in e.details.items():
            print(f"  {key}: {msg}", file=sys.stderr)
        return 2

    try:
        document = fetch_document(
            args.site,
            timeout=settings.fetch_timeout,
            include_headers=settings.include_headers,
        )
    except FetchError as e:
        print(f"{_RED}Error while making request:{_RESET} {e}", file=sys.stderr)
        return 1

    report = ClassificationEngine(settings).analyze(document.text)

    if args.json:
        print(report.model_dump_json(indent=2))
    else:
        print_report(args.site, report, verbose=args.verbose)
    return 0


if __name__ == "__main__":
    sys.exit(main())
