"""
instant-ink - HP Instant Ink printer status CLI.
Queries an HP printer on the local network for page usage and ink levels.

Examples:
    hp-instant-ink --printer 192.168.1.13
    hp-instant-ink --printer hp-printer.local --format json
    hp-instant-ink config --set-printer 192.168.1.13
    hp-instant-ink config --show
"""

import argparse
import asyncio
import sys
from typing import List, Optional

import structlog
from pydantic import ValidationError

from instant_ink.models.config import PersistedConfig
from instant_ink.models.printer import PrinterReading
from instant_ink.printers import HPPrinterClient, normalize_printer_url
from instant_ink.services.config_service import ConfigService
from instant_ink.services.output_service import (
    BLUE,
    BOLD,
    GREEN,
    colorize,
    format_json,
    format_table,
    print_alerts,
)
from instant_ink.utils.config import get_settings
from instant_ink.utils.exceptions import ConfigurationError, ParsingError, PrinterNetworkError
from instant_ink.utils.logging_config import setup_logging

logger = structlog.get_logger()

EXIT_OK = 0
EXIT_FAILURE = 1


def positive_int(value: str) -> int:
    """argparse type for a strictly positive integer."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {value!r}")
    if number <= 0:
        raise argparse.ArgumentTypeError("must be greater than 0")
    return number


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser."""
    parser = argparse.ArgumentParser(
        prog="hp-instant-ink",
        description="HP Instant Ink CLI Tool - Query HP printer status and ink levels",
        epilog=(
            "Examples:\n"
            "  hp-instant-ink --printer 192.168.1.13\n"
            "  hp-instant-ink --printer hp-printer.local --format json\n"
            "  hp-instant-ink config --set-printer 192.168.1.13\n"
            "  hp-instant-ink config --show"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-p", "--printer", metavar="HOST",
        help="Printer URL/hostname/IP (will auto-add /DevMgmt/ProductUsageDyn.xml)",
    )
    parser.add_argument(
        "-f", "--format", choices=["table", "json"], default="table",
        help="Output format (default: table)",
    )
    parser.add_argument(
        "-t", "--timeout", type=positive_int, metavar="SECONDS",
        help="Request timeout in seconds",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable verbose logging",
    )

    subparsers = parser.add_subparsers(dest="command")
    config_parser = subparsers.add_parser("config", help="Show or change stored defaults")
    config_parser.add_argument("--show", action="store_true", help="Show current configuration")
    config_parser.add_argument("--set-printer", metavar="HOST", help="Set default printer")
    config_parser.add_argument(
        "--set-timeout", type=positive_int, metavar="SECONDS", help="Set default timeout",
    )
    config_parser.add_argument("--reset", action="store_true", help="Reset configuration to defaults")
    return parser


def handle_config_command(args: argparse.Namespace, config_service: ConfigService) -> int:
    """Apply the ``config`` subcommand."""
    out = sys.stdout

    if args.reset:
        config_service.reset()
        out.write(colorize("Configuration reset to defaults", GREEN, stream=out) + "\n")
        return EXIT_OK

    if args.show:
        config = config_service.load()
        out.write(colorize("Current configuration:", BLUE, BOLD, stream=out) + "\n")
        out.write(config.model_dump_json(indent=2) + "\n")
        return EXIT_OK

    config = config_service.load()
    changed = False

    if args.set_printer is not None:
        config.printer_url = normalize_printer_url(args.set_printer)
        changed = True
        out.write(f"{colorize('Set default printer:', GREEN, stream=out)} {config.printer_url}\n")

    if args.set_timeout is not None:
        config.timeout_seconds = args.set_timeout
        changed = True
        out.write(f"{colorize('Set default timeout:', GREEN, stream=out)} {config.timeout_seconds}\n")

    if changed:
        config_service.save(config)
        out.write(colorize("Configuration saved", GREEN, stream=out) + "\n")
    else:
        out.write("No configuration changes made. Use --help to see available options.\n")
    return EXIT_OK


def resolve_printer_url(args: argparse.Namespace, config: PersistedConfig) -> Optional[str]:
    """--printer wins over the stored default; None when neither is set."""
    if args.printer:
        return normalize_printer_url(args.printer)
    if config.printer_url:
        return config.printer_url
    return None


async def fetch_reading(printer_url: str, timeout_seconds: int) -> PrinterReading:
    """Fetch one reading from the printer."""
    async with HPPrinterClient(printer_url, timeout_seconds) as client:
        return await client.fetch_reading()


def run_query(args: argparse.Namespace, config_service: ConfigService) -> int:
    """Query the printer and print the reading."""
    settings = get_settings()
    config = config_service.load()

    printer_url = resolve_printer_url(args, config)
    if printer_url is None:
        logger.error("No printer specified. Use --printer <host> or set a default "
                     "with 'config --set-printer <host>'")
        logger.error("Example: hp-instant-ink --printer 192.168.1.13")
        logger.error("         hp-instant-ink config --set-printer 192.168.1.13")
        return EXIT_FAILURE

    timeout = args.timeout or config.timeout_seconds
    logger.info("Using printer", url=printer_url, timeout=timeout, format=args.format)

    try:
        reading = asyncio.run(fetch_reading(printer_url, timeout))
    except PrinterNetworkError as e:
        logger.error(f"Could not connect to printer at {printer_url}")
        logger.error("Please check that the printer is online and the URL is correct")
        logger.error(e.message)
        return EXIT_FAILURE
    except ParsingError as e:
        logger.error("Failed to parse XML from printer")
        logger.error("Your printer may have a different XML format than expected")
        logger.error(e.message)
        return EXIT_FAILURE

    output = format_json(reading) if args.format == "json" else format_table(
        reading, settings.display_timezone
    )
    sys.stdout.write(output + "\n")
    print_alerts(reading, settings.low_ink_threshold)

    logger.info("Successfully retrieved printer data")
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the hp-instant-ink command."""
    args = build_parser().parse_args(argv)

    try:
        settings = get_settings()
    except ValidationError as e:
        sys.stderr.write(f"Configuration error: invalid INSTANT_INK_* environment settings\n{e}\n")
        return EXIT_FAILURE

    setup_logging(settings.log_level, verbose=args.verbose)
    logger.debug("Arguments", arguments=vars(args))

    try:
        config_service = ConfigService(settings.config_path)
        if args.command == "config":
            return handle_config_command(args, config_service)
        return run_query(args, config_service)
    except ConfigurationError as e:
        logger.error(e.message, **e.details)
        return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
