from __future__ import annotations

import argparse
import dataclasses
import sys
import time
from pathlib import Path
from typing import Optional, Sequence

from .builder import build
from .config import build_configuration, load_config
from .errors import BuildError, StageError


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Build the blog into a static site.")
    parser.add_argument("--config", default="site.toml", help="Path to site config file (TOML/YAML/JSON).")
    parser.add_argument("--source", default=None, help="Directory containing posts, pages and other sources.")
    parser.add_argument("--destination", default=None, help="Output directory for the site.")
    parser.add_argument(
        "--clean",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Replace the output directory instead of writing over it.",
    )
    parser.add_argument("--verbose", action="store_true", help="Print progress for every stage.")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = parse_args(argv)
    config_path = Path(args.config).resolve()
    data = load_config(config_path)

    try:
        config = build_configuration(data, config_path.parent)
    except BuildError as exc:
        print(f"Invalid config {config_path}: {exc}", file=sys.stderr)
        sys.exit(1)

    overrides = {}
    if args.source:
        overrides["source"] = Path(args.source).resolve()
    if args.destination:
        overrides["destination"] = Path(args.destination).resolve()
    if args.clean is not None:
        overrides["clean"] = args.clean
    if overrides:
        config = dataclasses.replace(config, **overrides)

    start = time.perf_counter()
    try:
        written = build(config.source, config.destination, config, verbose=args.verbose)
    except StageError as exc:
        print(f"Build failed in stage '{exc.stage}': {exc.cause}", file=sys.stderr)
        sys.exit(1)
    except BuildError as exc:
        print(f"Build failed: {exc}", file=sys.stderr)
        sys.exit(1)
    elapsed = time.perf_counter() - start
    print(f"Build completed in {elapsed:.2f}s.")
    print(f"{len(written)} files written to: {config.destination}")
