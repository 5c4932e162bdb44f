"""Command line entry point for synchronizing translation files."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Sequence

from locsync.core.config import AppSettings, get_settings
from locsync.core.errors import ConfigurationError, LocsyncError
from locsync.integrations.resources import RESOURCE_FORMATS, get_resource_store, infer_format
from locsync.integrations.translators import ServiceRegistry, check_credentials, get_service_names
from locsync.services.cache import cache_path_for
from locsync.services.interpolation import MATCHER_PRESETS, InterpolationMatcher
from locsync.services.sync import SyncDriver, SyncJob


logger = logging.getLogger("locsync.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="locsync",
        description=(
            "Translate a source resource file into one or more target files, "
            "re-translating only strings that changed since the last run."
        ),
    )
    parser.add_argument("--src-file", required=True, type=Path, help="Source resource file.")
    parser.add_argument("--src-lng", required=True, help="Language code of the source file.")
    parser.add_argument(
        "--src-format",
        choices=sorted(RESOURCE_FORMATS),
        help="Source file format (inferred from the file suffix when omitted).",
    )
    parser.add_argument(
        "--target-file",
        required=True,
        nargs="+",
        type=Path,
        help="One or more target files, paired with --target-lng in order.",
    )
    parser.add_argument(
        "--target-lng",
        required=True,
        nargs="+",
        help="One language code per target file.",
    )
    parser.add_argument(
        "--target-format",
        choices=sorted(RESOURCE_FORMATS),
        help="Target file format (inferred from the file suffix when omitted).",
    )
    parser.add_argument(
        "--service",
        required=True,
        help=f"Translation service: {', '.join(get_service_names())}.",
    )
    parser.add_argument(
        "--service-config",
        help="Provider credential; overrides the API key from the environment.",
    )
    parser.add_argument(
        "--matcher",
        default="none",
        choices=sorted(MATCHER_PRESETS),
        help="Interpolation placeholders to protect during translation (default: none).",
    )
    parser.add_argument(
        "--matcher-pattern",
        action="append",
        default=[],
        dest="matcher_patterns",
        help="Custom placeholder regular expression; may be repeated. Overrides --matcher.",
    )
    parser.add_argument(
        "--cache-dir",
        type=Path,
        help="Directory for translation caches (default: LOCSYNC_CACHE_DIR or translate-cache).",
    )
    parser.add_argument(
        "--log-level",
        help="Logging level (default: LOCSYNC_LOG_LEVEL or WARNING).",
    )
    return parser


def build_jobs(args: argparse.Namespace, settings: AppSettings) -> list[SyncJob]:
    if len(args.target_file) != len(args.target_lng):
        raise ConfigurationError(
            f"Got {len(args.target_file)} target files but {len(args.target_lng)} target languages."
        )

    source_format = args.src_format or infer_format(args.src_file)
    get_resource_store(source_format)
    cache_dir = args.cache_dir or settings.cache_dir

    jobs: list[SyncJob] = []
    for target_path, target_lng in zip(args.target_file, args.target_lng):
        target_format = args.target_format or infer_format(target_path)
        get_resource_store(target_format)
        jobs.append(
            SyncJob(
                source_path=args.src_file,
                target_path=target_path,
                src_lng=args.src_lng,
                target_lng=target_lng,
                cache_path=cache_path_for(cache_dir, args.src_file, target_path),
                source_format=source_format,
                target_format=target_format,
            )
        )
    return jobs


async def _run(args: argparse.Namespace, settings: AppSettings) -> int:
    try:
        matcher = InterpolationMatcher.from_config(args.matcher, args.matcher_patterns)
        jobs = build_jobs(args, settings)
        service = ServiceRegistry(settings).get(args.service)
        check_credentials(service, args.service_config)
        driver = SyncDriver(
            service,
            service_name=args.service,
            matcher=matcher,
            service_config=args.service_config,
            emit=print,
        )
        await driver.sync_all(jobs)
    except LocsyncError as exc:
        logger.error("%s", exc)
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


def main(argv: Sequence[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    settings = get_settings()

    level_name = (args.log_level or settings.log_level).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )

    exit_code = asyncio.run(_run(args, settings))
    raise SystemExit(exit_code)


def run() -> None:
    """Entrypoint for the `locsync` script."""
    main()


if __name__ == "__main__":  # pragma: no cover - script entry point
    run()
