"""Publish dated data files to the git remote, one year/month bucket per commit.

The collector writes files such as ``dates/2024/01/2024-01-31.csv``. This
script scans the working tree for modified and untracked files under the
dated root, groups them by their ``YYYY/MM`` segments and, oldest bucket
first, stages, commits (``Update YYYY/MM``) and pushes each group. The first
failure stops the run; buckets pushed before it stay published and the rest
remain as working tree changes for the next scheduled run.

Configuration:
- Command line flags take precedence over ``BUCKETPUSH_*`` environment
  variables, which take precedence over the YAML file given via ``--config``
  or ``BUCKETPUSH_CONFIG``.
- ``BUCKETPUSH_LOG_LEVEL`` sets the log level (default ``INFO``).
"""
from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

from bucketpush.models.settings import PublishSettings
from bucketpush.services.bucketizer import BucketKeyParser, Bucketizer, default_key_pattern
from bucketpush.services.errors import ConfigurationError, ScanFailure
from bucketpush.services.pipeline import PublishPipeline, SyncResult, SyncRunner
from bucketpush.services.repository import GitRepository
from bucketpush.services.scanner import ChangeScanner
from bucketpush.services.settings_loader import load_settings

LOGGER = logging.getLogger("bucketpush.publish")


def _configure_logging(level_name: str | None = None) -> None:
    level_name = (level_name or os.getenv("BUCKETPUSH_LOG_LEVEL", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    logging.basicConfig(level=level, stream=sys.stdout, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logging.getLogger("bucketpush").setLevel(level)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Publish dated files to the git remote one month at a time.")
    parser.add_argument("--repo", dest="repo_path", help="Repository root (default from BUCKETPUSH_REPO or '.').")
    parser.add_argument("--root", help="Directory holding YYYY/MM folders (default from BUCKETPUSH_ROOT or 'dates').")
    parser.add_argument(
        "--key-pattern",
        help="Regular expression with 'year' and 'month' named groups used to derive bucket keys.",
    )
    parser.add_argument("--remote", help="Remote to push to (default: git's configured upstream).")
    parser.add_argument("--branch", help="Remote branch to push HEAD to.")
    parser.add_argument("--config", type=Path, help="YAML settings file (default from BUCKETPUSH_CONFIG).")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        default=None,
        help="Report the buckets that would be published without touching the repository.",
    )
    parser.add_argument("--log-level", help="Logging level (default from BUCKETPUSH_LOG_LEVEL or INFO).")
    return parser.parse_args(argv)


def _build_runner(settings: PublishSettings) -> SyncRunner:
    scanner = ChangeScanner(
        repo_path=settings.repo_path,
        root=settings.root,
        git_executable=settings.git_executable,
    )
    parser = BucketKeyParser(pattern=settings.key_pattern or default_key_pattern(settings.root))
    repository = GitRepository(
        repo_path=settings.repo_path,
        remote=settings.remote,
        branch=settings.branch,
        git_executable=settings.git_executable,
    )
    pipeline = PublishPipeline(
        repository=repository,
        identity=settings.identity,
        message_template=settings.message_template,
    )
    return SyncRunner(scanner=scanner, bucketizer=Bucketizer(parser=parser), pipeline=pipeline)


def _log_summary(result: SyncResult) -> None:
    report = result.report
    for transaction in report.published:
        LOGGER.info("Published %s (%d files)", transaction.key, len(transaction.files))

    failure = report.failure
    if failure is None:
        if result.dry_run:
            LOGGER.info("Dry run: %d bucket(s) would be published.", len(result.buckets))
        else:
            LOGGER.info("Published %d bucket(s).", len(report.published))
        return

    stage = failure.stage.value if failure.stage else "unknown"
    LOGGER.error("Bucket %s failed at %s: %s", failure.key, stage, failure.error)
    if report.skipped:
        LOGGER.error("%d bucket(s) left unpublished after the failure.", len(report.skipped))


def run(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    _configure_logging(args.log_level)

    overrides = {
        "repo_path": args.repo_path,
        "root": args.root,
        "key_pattern": args.key_pattern,
        "remote": args.remote,
        "branch": args.branch,
        "dry_run": args.dry_run,
    }
    try:
        settings = load_settings(args.config, overrides=overrides)
        runner = _build_runner(settings)
    except ConfigurationError as exc:
        LOGGER.error("Invalid configuration: %s", exc)
        return 1

    LOGGER.info("PUBLISH_START repo=%s root=%s", settings.repo_path, settings.root)
    try:
        result = runner.run(dry_run=settings.dry_run)
    except ScanFailure as exc:
        LOGGER.error("Scan failed: %s", exc)
        return 1

    _log_summary(result)
    return 0 if result.succeeded else 1


def main() -> None:  # pragma: no cover - console script entry point
    raise SystemExit(run())


if __name__ == "__main__":  # pragma: no cover - script entry point
    main()
