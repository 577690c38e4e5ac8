"""Orchestration layer that scans, buckets and publishes dated files one bucket at a time."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, Protocol, Sequence

from bucketpush.models.changes import Bucket, WorkingTreeChange
from bucketpush.models.publisher import PublishReport, PublishStage, PublishTransaction
from bucketpush.models.settings import DEFAULT_MESSAGE_TEMPLATE, CommitIdentity
from bucketpush.services.errors import (
    BucketPushError,
    CommitFailure,
    ConfigurationError,
    PushFailure,
    StageFailure,
    TransactionFailure,
)
from bucketpush.services.repository import SupportsRepository


logger = logging.getLogger(__name__)

_FAILURES: dict[PublishStage, type[TransactionFailure]] = {
    PublishStage.STAGE: StageFailure,
    PublishStage.COMMIT: CommitFailure,
    PublishStage.PUSH: PushFailure,
}


class SupportsScanning(Protocol):
    """Protocol describing the working tree scanner."""

    def scan(self) -> frozenset[WorkingTreeChange]:
        """Return the publishable working tree changes."""


class SupportsBucketing(Protocol):
    """Protocol describing the bucketizer."""

    def bucketize(self, changes: Iterable[WorkingTreeChange]) -> list[Bucket]:
        """Return buckets ordered by ascending key."""


@dataclass(slots=True)
class PublishPipeline:
    """Publish buckets in order as independent stage, commit and push transactions.

    The run stops at the first failing stage. Buckets published before the
    failure stay published, the failing bucket's local state is left for the
    operator and later buckets are never attempted.
    """

    repository: SupportsRepository
    identity: CommitIdentity | None = None
    message_template: str = DEFAULT_MESSAGE_TEMPLATE

    def __post_init__(self) -> None:
        try:
            self.message_template.format(key="0000/00")
        except (AttributeError, KeyError, IndexError, ValueError) as exc:
            raise ConfigurationError(
                f"Commit message template {self.message_template!r} may only reference {{key}}"
            ) from exc

    def commit_message(self, bucket: Bucket) -> str:
        return self.message_template.format(key=str(bucket.key))

    def publish(self, buckets: Sequence[Bucket]) -> PublishReport:
        report = PublishReport()
        for position, bucket in enumerate(buckets):
            logger.info("BUCKET key=%s files=%d", bucket.key, len(bucket.files))
            transaction = PublishTransaction.for_bucket(bucket, self.commit_message(bucket))
            report.transactions.append(transaction)

            self._execute(transaction)
            if transaction.error is not None:
                report.skipped.extend(buckets[position + 1 :])
                logger.error(
                    "Publishing stopped at bucket %s during %s: %s",
                    transaction.key,
                    transaction.stage.value if transaction.stage else "unknown",
                    transaction.error,
                )
                if report.skipped:
                    logger.warning(
                        "Not attempted: %s", ", ".join(str(skipped.key) for skipped in report.skipped)
                    )
                break

            logger.info("Published bucket %s", transaction.key)
        return report

    def _execute(self, transaction: PublishTransaction) -> None:
        steps: list[tuple[PublishStage, Callable[[], object]]] = [
            (PublishStage.STAGE, lambda: self.repository.stage(transaction.files)),
            (
                PublishStage.COMMIT,
                lambda: self.repository.commit(transaction.message, transaction.files, identity=self.identity),
            ),
            (PublishStage.PUSH, self.repository.push),
        ]
        for stage, step in steps:
            transaction.stage = stage
            try:
                step()
            except TransactionFailure as exc:
                transaction.error = exc
                return
            except (BucketPushError, OSError) as exc:
                failure = _FAILURES[stage](str(transaction.key), str(exc))
                failure.__cause__ = exc
                transaction.error = failure
                return
        transaction.completed = True


@dataclass(slots=True)
class SyncResult:
    """Structured summary of one scan, bucket and publish cycle."""

    changes: frozenset[WorkingTreeChange] = field(default_factory=frozenset)
    buckets: list[Bucket] = field(default_factory=list)
    report: PublishReport = field(default_factory=PublishReport)
    dry_run: bool = False

    @property
    def unbucketed(self) -> list[str]:
        """Paths that changed but did not match the bucket key pattern."""

        bucketed = {path for bucket in self.buckets for path in bucket.files}
        return sorted(change.path for change in self.changes if change.path not in bucketed)

    @property
    def succeeded(self) -> bool:
        return self.report.succeeded


@dataclass(slots=True)
class SyncRunner:
    """Coordinate the scanner, bucketizer and publish pipeline for one cycle."""

    scanner: SupportsScanning
    bucketizer: SupportsBucketing
    pipeline: PublishPipeline

    def run(self, *, dry_run: bool = False) -> SyncResult:
        """Scan the working tree and publish each bucket; scan failures propagate."""

        changes = self.scanner.scan()
        if not changes:
            logger.info("No changes to publish.")
            return SyncResult(dry_run=dry_run)

        buckets = self.bucketizer.bucketize(changes)
        result = SyncResult(changes=changes, buckets=buckets, dry_run=dry_run)
        if result.unbucketed:
            logger.info("Ignoring %d change(s) without a bucket key", len(result.unbucketed))
        if not buckets:
            logger.info("No bucketable changes to publish.")
            return result

        if dry_run:
            for bucket in buckets:
                logger.info(
                    "DRY_RUN key=%s files=%d message=%r",
                    bucket.key,
                    len(bucket),
                    self.pipeline.commit_message(bucket),
                )
            return result

        result.report = self.pipeline.publish(buckets)
        return result
