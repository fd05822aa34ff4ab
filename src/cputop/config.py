"""Configuration and logging setup for cputop."""

import argparse
import logging
import sys
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

from cputop.models import MIN_INTERVAL, Scale


class DisplayMode(Enum):
    """How sampled records are presented."""

    TABLE = "table"
    STATIC = "static"


@dataclass(slots=True)
class Settings:
    """Settings for one cputop run."""

    interval: float = 1.0
    mode: DisplayMode = DisplayMode.TABLE
    scale: Scale = Scale.MACHINE
    workers: int = 1
    log_level: str = "WARNING"

    def __post_init__(self) -> None:
        self.interval = max(MIN_INTERVAL, self.interval)
        self.workers = max(1, self.workers)


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser."""
    parser = argparse.ArgumentParser(
        prog="cputop",
        description="Sample per-process CPU usage once and rank the results.",
    )
    parser.add_argument(
        "-i",
        "--interval",
        type=float,
        default=1.0,
        help="seconds between the two snapshots, at least 0.1 (default: %(default)s)",
    )
    parser.add_argument(
        "-m",
        "--mode",
        choices=[mode.value for mode in DisplayMode],
        default=DisplayMode.TABLE.value,
        help="interactive table or one-shot text dump (default: %(default)s)",
    )
    parser.add_argument(
        "--static",
        dest="mode",
        action="store_const",
        const=DisplayMode.STATIC.value,
        help="shortcut for --mode static",
    )
    parser.add_argument(
        "--per-core",
        action="store_true",
        help="report usage as share of one core instead of the whole machine",
    )
    parser.add_argument(
        "-w",
        "--workers",
        type=int,
        default=1,
        help="threads used to read process counters (default: %(default)s)",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        type=str.upper,
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="same as --log-level DEBUG")
    return parser


def parse_args(argv: Sequence[str] | None = None) -> Settings:
    """Parse ``argv`` into Settings."""
    args = build_parser().parse_args(argv)
    return Settings(
        interval=args.interval,
        mode=DisplayMode(args.mode),
        scale=Scale.CORE if args.per_core else Scale.MACHINE,
        workers=args.workers,
        log_level="DEBUG" if args.verbose else args.log_level,
    )


def setup_logging(level: str = "WARNING") -> logging.Logger:
    """
    Configure the ``cputop`` logger.

    Output goes to stderr so it never mixes with the static dump on stdout.
    """
    logger = logging.getLogger("cputop")
    logger.setLevel(getattr(logging, level.upper(), logging.WARNING))

    # Remove existing handlers to avoid duplicates
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("[%(levelname)s] %(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.propagate = False
    return logger
