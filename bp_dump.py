#!/usr/bin/env python3
"""Dump Blueprint function bytecode and class layouts to text reports."""

from __future__ import annotations

import argparse
import logging
import time
from json import JSONDecodeError
from pathlib import Path

from bpdump import AssetProvider, BlueprintDumper, DumpError, DumpOptions, OperatingModes
from bpdump.dumper import list_assets, matching_paths

logger = logging.getLogger("bp_dump")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("asset_root", type=Path, help="Directory holding the exported asset documents")
    parser.add_argument(
        "asset_match",
        help="Case-insensitive substring an asset path must contain to be processed",
    )
    parser.add_argument("output_dir", type=Path, help="Directory receiving the reports")
    parser.add_argument(
        "--list",
        action="store_true",
        dest="list_assets",
        help="Write the matching asset paths to AssetList.txt",
    )
    parser.add_argument(
        "--dump",
        action="store_true",
        help="Dump the matching assets (the default when no operation is given)",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args()


def resolve_options(args: argparse.Namespace) -> DumpOptions:
    return DumpOptions.from_flags(
        args.asset_root,
        args.asset_match,
        args.output_dir,
        list_assets=args.list_assets,
        dump=args.dump,
    )


def dump_matching(provider: AssetProvider, options: DumpOptions) -> int:
    """Dump every matching asset and return the number of failed exports."""

    dumper = BlueprintDumper()
    failures = 0
    for path in matching_paths(provider.paths(), options.asset_match):
        try:
            asset = provider.load(path)
        except (DumpError, JSONDecodeError, KeyError, OSError) as exc:
            logger.error('Error loading asset "%s".\n[%s] %s', path, type(exc).__name__, exc)
            failures += 1
            continue
        summary = dumper.dump_asset(asset, options.output_dir)
        failures += len(summary.failed)
    return failures


def main() -> None:
    start_time = time.perf_counter()
    args = parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    options = resolve_options(args)
    for line in options.describe():
        print(line)

    try:
        provider = AssetProvider(options.asset_root)
    except FileNotFoundError as exc:
        raise SystemExit(str(exc))

    if options.modes & OperatingModes.LIST:
        selected = list_assets(provider.paths(), options.asset_match, options.output_dir)
        print(f"{len(selected)} assets listed in {options.output_dir / 'AssetList.txt'}")

    if options.modes & OperatingModes.DUMP:
        failures = dump_matching(provider, options)
        if failures:
            logger.warning("%d exports or assets could not be processed", failures)

    total_time = time.perf_counter() - start_time
    logger.info("Completed.")
    print(f"total execution time: {total_time:.2f}s")


if __name__ == "__main__":
    main()
