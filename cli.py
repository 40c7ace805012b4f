#!/usr/bin/env python3
"""
NumField - Masked Amount Input
Command Line Entry Point
Replays a sequence of edits through a number format watcher and prints
what the field would display after each one. Useful for checking a
configuration before wiring it to a widget.
"""
import argparse
import sys
import traceback
import logging
from pathlib import Path
from typing import Optional, List, Dict, Any
__version__ = "1.0.0"
def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="numfield",
        description="NumField - replay edits through the amount input mask",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  numfield --decimal --min 12 --max 15000 --suffix '$' 20 20000 ''
  numfield --check-config --min 10 --max 5
  numfield --no-grouping 1234567
  numfield --debug --log-dir ./logs 12a34
        """
    )
    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"NumField {__version__}"
    )
    parser.add_argument(
        "edits",
        nargs="*",
        help="Full field text after each edit, replayed in order"
    )
    parser.add_argument(
        "--suffix",
        default="",
        help="Text shown after the number, e.g. a currency symbol"
    )
    parser.add_argument(
        "--decimal",
        action="store_true",
        help="Accept up to two decimal places"
    )
    parser.add_argument(
        "--min",
        dest="min_amount",
        type=float,
        default=0.0,
        help="Minimum amount (default: 0)"
    )
    parser.add_argument(
        "--max",
        dest="max_amount",
        type=float,
        default=None,
        help="Maximum amount (default: 2147483647)"
    )
    parser.add_argument(
        "--no-grouping",
        action="store_true",
        help="Disable thousands grouping"
    )
    parser.add_argument(
        "--allow-empty",
        action="store_true",
        help="Leave a cleared field empty instead of showing the minimum"
    )
    parser.add_argument(
        "--grouping-separator",
        default=" ",
        help="Grouping character (default: space)"
    )
    parser.add_argument(
        "--decimal-separator",
        default=".",
        help="Decimal character (default: '.')"
    )
    parser.add_argument(
        "--check-config", "-c",
        action="store_true",
        help="Validate the configuration and exit"
    )
    parser.add_argument(
        "--debug", "-d",
        action="store_true",
        help="Enable debug logging"
    )
    parser.add_argument(
        "--log-dir",
        type=str,
        help="Custom directory for log files"
    )
    return parser.parse_args(argv)
def build_settings(args: argparse.Namespace) -> Dict[str, Any]:
    """Translate parsed arguments into a watcher settings mapping."""
    from config_validation import DEFAULT_SETTINGS
    settings = dict(DEFAULT_SETTINGS)
    settings.update({
        "suffix_text": args.suffix,
        "decimal": args.decimal,
        "min_amount": args.min_amount,
        "grouping_enabled": not args.no_grouping,
        "allow_empty": args.allow_empty,
        "grouping_separator": args.grouping_separator,
        "decimal_separator": args.decimal_separator,
    })
    if args.max_amount is not None:
        settings["max_amount"] = args.max_amount
    return settings
def report_issues(issues) -> None:
    print("Configuration problems:")
    for issue in issues:
        print(f"   - {issue.field}: {issue.title}. {issue.message}")
def replay_edits(watcher, edits: List[str]) -> None:
    """Feed each edit to the watcher and print the resulting field state."""
    for text in edits:
        result = watcher.on_edit(text)
        value = "-" if result.value is None else repr(result.value)
        display = watcher.current_text if result.display_text is None else result.display_text
        cursor = "-" if result.cursor is None else result.cursor
        print(f"{text!r:>16} -> {result.outcome.value:<16} {display!r:<20} cursor={cursor} value={value}")
def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the NumField command line tool."""
    args = None
    try:
        args = parse_arguments(argv)
        from logger import setup_logger
        logger = setup_logger(
            log_dir=Path(args.log_dir) if args.log_dir else None,
            console_level=logging.DEBUG if args.debug else logging.WARNING,
        )
        from config_validation import validate_watcher_configuration
        settings = build_settings(args)
        issues = validate_watcher_configuration(settings)
        if args.check_config:
            if issues:
                report_issues(issues)
                return 1
            print("Configuration is valid.")
            return 0
        if issues:
            report_issues(issues)
            print("\nRefusing to replay edits with an invalid configuration.")
            return 1
        from number_format_watcher import NumberFormatWatcher
        watcher = NumberFormatWatcher.from_settings(settings)
        with logger.timer(f"replay of {len(args.edits)} edits"):
            replay_edits(watcher, args.edits)
        return 0
    except KeyboardInterrupt:
        print("\n\nInterrupted by user")
        return 130
    except Exception as e:
        print(f"\nCritical error in NumField:")
        print(f"   {type(e).__name__}: {e}")
        if args is not None and args.debug:
            print(f"\nDebug traceback:")
            traceback.print_exc()
        else:
            print(f"\nRun with --debug for detailed error information")
        return 1
if __name__ == "__main__":
    sys.exit(main())
