#!/usr/bin/env python3
"""Resolve a source page from the command line and print its embed URL."""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import sys
from pathlib import Path

# Ensure project root is importable
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from embedengine import ConfigStore, EmbedResolverError, EmbedService, Settings
from embedengine.logger import configure_logging


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "url",
        nargs="?",
        help="Source page URL (defaults to the configured one)",
    )
    parser.add_argument(
        "--fresh",
        action="store_true",
        help="Skip the cache lookup and always launch the browser",
    )
    parser.add_argument(
        "--headed",
        action="store_true",
        help="Show the browser window",
    )
    return parser.parse_args(argv)


async def run(args: argparse.Namespace, settings: Settings) -> int:
    source_url = args.url or ConfigStore(settings.config_file).source_url()
    if not source_url:
        print("No URL given and none configured.", file=sys.stderr)
        return 2

    service = EmbedService.from_settings(settings)
    try:
        if args.fresh:
            locator = await service.resolver.resolve(source_url)
            service.cache.put(source_url, locator, service.clock.now())
        else:
            locator = await service.get_locator(source_url)
    except EmbedResolverError as exc:
        print(f"✗ {exc}", file=sys.stderr)
        return 1

    print(locator)
    return 0


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    settings = Settings.from_env()
    if args.headed:
        settings = dataclasses.replace(settings, headless=False)
    configure_logging(settings.log_level, settings.log_format)
    sys.exit(asyncio.run(run(args, settings)))


if __name__ == "__main__":
    main()
