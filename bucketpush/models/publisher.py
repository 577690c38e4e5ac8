"""Data structures describing the outcome of bucket publish transactions."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from bucketpush.models.changes import Bucket, BucketKey


class PublishStage(str, Enum):
    """Sub-operations of a publish transaction, in execution order."""

    STAGE = "stage"
    COMMIT = "commit"
    PUSH = "push"


@dataclass(slots=True)
class PublishTransaction:
    """Unit of work that stages, commits and pushes one bucket."""

    key: BucketKey
    files: tuple[str, ...]
    message: str
    stage: PublishStage | None = None
    error: Exception | None = None
    completed: bool = False

    @classmethod
    def for_bucket(cls, bucket: Bucket, message: str) -> "PublishTransaction":
        return cls(key=bucket.key, files=bucket.files, message=message)

    @property
    def succeeded(self) -> bool:
        """Return ``True`` once all three stages finished without error."""

        return self.completed and self.error is None


@dataclass(slots=True)
class PublishReport:
    """Structured summary of a publish run."""

    transactions: list[PublishTransaction] = field(default_factory=list)
    skipped: list[Bucket] = field(default_factory=list)

    @property
    def failure(self) -> PublishTransaction | None:
        for transaction in self.transactions:
            if transaction.error is not None:
                return transaction
        return None

    @property
    def succeeded(self) -> bool:
        """Return ``True`` when no transaction failed (including empty runs)."""

        return self.failure is None

    @property
    def published(self) -> list[PublishTransaction]:
        return [transaction for transaction in self.transactions if transaction.succeeded]
