#!/usr/bin/env python3
"""
Parabola Hough
Command line entry point for curve and eyelid detection.
"""

from __future__ import annotations

import argparse
import logging
import sys

from cli.detect import cmd_curve, cmd_eyelids
from hough.settings import HoughSettings


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Parabola Hough")

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default="WARNING",
        help="Set the logging level (default: WARNING)",
    )
    parser.add_argument(
        "--settings",
        default=None,
        help="Path to a JSON settings file (default: ~/.parabola_hough_settings.json)",
    )
    parser.add_argument(
        "--debug-dir",
        default=None,
        help="Directory to save debugging images.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    curve = subparsers.add_parser(
        "curve", help="Detect parabolas y = a t^2 + b t + c"
    )
    curve.add_argument("paths", nargs="+", help="Image files or directories")
    for name in ("a", "b", "c"):
        curve.add_argument(
            f"--{name}",
            nargs=3,
            type=float,
            required=True,
            metavar=("MIN", "MAX", "STEP"),
            help=f"Search range for parameter {name}",
        )
    curve.add_argument(
        "--max-candidates", type=int, default=None, help="Number of curves to report"
    )
    curve.add_argument(
        "--normalized",
        action="store_true",
        help="Rank curves by mean rather than total vote",
    )

    eyelids = subparsers.add_parser(
        "eyelids", help="Locate upper and lower eyelids around an iris"
    )
    eyelids.add_argument("paths", nargs="+", help="Image files or directories")
    eyelids.add_argument("--iris-x", type=float, required=True)
    eyelids.add_argument("--iris-y", type=float, required=True)
    eyelids.add_argument("--iris-radius", type=float, required=True)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    # Configure logging based on command line argument
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    settings = HoughSettings.load_from_file(args.settings)
    if args.log_level == "DEBUG":
        settings.debug = True

    if args.command == "curve":
        if args.max_candidates is not None:
            settings.max_candidates = args.max_candidates
        if args.normalized:
            settings.normalized = True
        return cmd_curve(
            args.paths,
            tuple(args.a),
            tuple(args.b),
            tuple(args.c),
            settings,
            debug_dir=args.debug_dir,
        )
    return cmd_eyelids(
        args.paths,
        (args.iris_x, args.iris_y),
        args.iris_radius,
        settings,
        debug_dir=args.debug_dir,
    )


if __name__ == "__main__":
    sys.exit(main())
