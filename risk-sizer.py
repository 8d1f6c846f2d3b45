#!/usr/bin/env python3
"""
RiskSizer: Position Size Calculator for Index Futures
======================================================

Sizes a trade so that hitting the stop loses at most the chosen share of
the account. Fields not given on the command line keep their last saved
value.

Usage:
    python risk-sizer.py --balance 50000 --risk 1 --instrument ES --micro \\
        --entry 5000 --stop 4990 --target 5030
    python risk-sizer.py --stop 4995            # change one field
    python risk-sizer.py --show                 # print saved fields
"""

import argparse
import json
import sys
from pathlib import Path

from loguru import logger

# Local imports
from risksizer.calculator import (
    ACCOUNT_BALANCE,
    ENTRY,
    IS_MICRO,
    MAX_RISK_PERCENTAGE,
    SELECTED_INDEX,
    STOP_LOSS,
    TAKE_PROFIT,
    PositionCalculator,
    format_result,
    result_to_dict,
)
from risksizer.core.errors import RiskSizerError
from risksizer.utils.config import load_config
from risksizer.utils.logging_config import setup_logging
from risksizer.utils.settings_store import JsonSettingsStore, MemorySettingsStore


VERSION = "1.0.0"


def _collect_changes(args: argparse.Namespace) -> dict:
    """Map the given command line options onto form fields."""
    changes = {}
    for option, key in (
        ("balance", ACCOUNT_BALANCE),
        ("risk", MAX_RISK_PERCENTAGE),
        ("instrument", SELECTED_INDEX),
        ("entry", ENTRY),
        ("stop", STOP_LOSS),
        ("target", TAKE_PROFIT),
    ):
        value = getattr(args, option)
        if value is not None:
            changes[key] = value
    if args.micro is not None:
        changes[IS_MICRO] = args.micro
    if args.clear_target:
        changes[TAKE_PROFIT] = ""
    return changes


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="RiskSizer: position size calculator for index futures",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python risk-sizer.py --balance 10000 --risk 0.5 --instrument Non-index --entry 100 --stop 95
  python risk-sizer.py --instrument NQ --no-micro
  python risk-sizer.py --target 5030 --json
        """
    )

    # Account settings
    parser.add_argument("--balance", "-b", type=str, help="Account balance ($)")
    parser.add_argument("--risk", "-r", type=str, help="Max risk in percent, 0.125 to 5 in 0.125 steps")
    parser.add_argument("--instrument", "-i", type=str, help="ES, NQ or Non-index")
    parser.add_argument("--micro", action=argparse.BooleanOptionalAction, default=None,
                        help="Use micro contracts (index instruments only)")

    # Trade parameters
    parser.add_argument("--entry", "-e", type=str, help="Entry price")
    parser.add_argument("--stop", "-s", type=str, help="Stop loss price")
    parser.add_argument("--target", "-t", type=str, help="Take profit price (optional)")
    parser.add_argument("--clear-target", action="store_true", help="Forget the saved take profit")

    # Output
    parser.add_argument("--json", action="store_true", help="Print the result as JSON")
    parser.add_argument("--show", action="store_true", help="Print the current field values")
    parser.add_argument("--no-save", action="store_true", help="Do not persist field values")

    # Config
    parser.add_argument("--config", "-c", type=str, help="Path to .env config file")
    parser.add_argument("--log-level", type=str, default=None, help="Logging level")

    args = parser.parse_args()

    setup_logging(args.log_level or "WARNING")

    # Load config
    try:
        config = load_config(args.config)
    except (ValueError, OSError) as e:
        logger.error(f"Failed to load config: {e}")
        sys.exit(1)

    setup_logging(
        args.log_level or config.logging.log_level,
        Path(config.logging.log_dir),
        config.logging.log_retention_days,
    )
    logger.debug(f"RiskSizer v{VERSION}")

    store = None
    if args.no_save:
        # Start from the saved values but never write them back
        saved = JsonSettingsStore(config.storage.settings_path).load() if config.storage.persist else {}
        store = MemorySettingsStore(saved)
    calc = PositionCalculator.from_config(config, store=store)

    try:
        changes = _collect_changes(args)
        outcome = calc.update(**changes) if changes else calc.result()
    except RiskSizerError as e:
        logger.error(str(e))
        sys.exit(2)

    if args.show:
        for key, value in calc.fields.items():
            print(f"{key}: {value}")
        print(calc.risk_label())
        print()

    if args.json:
        print(json.dumps(result_to_dict(outcome)))
    else:
        print(format_result(outcome))


if __name__ == "__main__":
    main()
