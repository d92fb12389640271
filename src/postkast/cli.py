"""CLI entry point for postkast."""

import argparse
import logging
import sys

import structlog

from postkast.config import dump_settings, load_settings, sample_settings
from postkast.exceptions import ConfigError


def _configure_logging(verbose: bool) -> None:
    """Route stdlib and structlog output to stderr so stdout only carries envelopes."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(level=level, stream=sys.stderr, format="%(levelname)s %(name)s: %(message)s")
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.stdlib.LoggerFactory(),
    )


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="postkast",
        description="Postkast - print inbox summaries of your IMAP accounts",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")
    subparsers.add_parser("list", help="List inbox envelopes of all accounts (default)")
    subparsers.add_parser("sample", help="Print a sample configuration file")

    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    if args.command == "sample":
        print(dump_settings(sample_settings()), end="")
        return 0

    return _handle_list()


def _handle_list() -> int:
    """Handle the list command."""
    from postkast.service import run

    try:
        settings = load_settings()
    except ConfigError as e:
        print("Example configuration:", file=sys.stderr)
        print(dump_settings(sample_settings()), end="", file=sys.stderr)
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    return run(settings)


if __name__ == "__main__":
    sys.exit(main())
