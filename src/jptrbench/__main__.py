"""Command-line entry point: ``python -m jptrbench``."""

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any

from jptrbench import BenchmarkConfig
from jptrbench import JsonParser
from jptrbench import main
from jptrbench.libraries import DEFAULT_LIBRARIES


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jptrbench",
        description="Compare JSON pointer libraries on a JSON fixture.",
    )
    parser.add_argument(
        "--fixture", type=Path, help="JSON document to benchmark against"
    )
    parser.add_argument(
        "--parser",
        choices=[p.value for p in JsonParser],
        help="JSON parser used to load the fixture (default: orjson)",
    )
    parser.add_argument(
        "--cycles", type=int, help="repetitions of each comparison"
    )
    parser.add_argument(
        "--samples",
        type=int,
        dest="sample_size",
        help="number of randomly drawn pointers",
    )
    parser.add_argument(
        "--seed", type=int, help="seed for pointer sampling"
    )
    parser.add_argument(
        "--library",
        action="append",
        dest="libraries",
        choices=[lib.name for lib in DEFAULT_LIBRARIES],
        help="restrict the run to this library (repeatable)",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="log progress"
    )
    return parser


def cli(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    overrides: dict[str, Any] = {}
    for key in ("fixture", "cycles", "sample_size", "seed"):
        value = getattr(args, key)
        if value is not None:
            overrides[key] = value
    if args.parser is not None:
        overrides["parser"] = JsonParser(args.parser)
    if args.libraries:
        overrides["libraries"] = tuple(args.libraries)

    try:
        config = replace(BenchmarkConfig.from_env(), **overrides)
    except (TypeError, ValueError) as e:
        parser.error(str(e))

    return 0 if main(config) else 1


if __name__ == "__main__":
    sys.exit(cli())
