"""Domain exceptions raised while scanning and publishing dated buckets."""

from __future__ import annotations

from typing import Sequence


class BucketPushError(RuntimeError):
    """Base class for every failure surfaced by the publish workflow."""


class ConfigurationError(BucketPushError):
    """Raised when settings or the key pattern cannot be used."""


class GitCommandError(BucketPushError):
    """Raised when a git invocation cannot be executed or exits non-zero."""

    def __init__(self, args: Sequence[str], returncode: int | None, stderr: str) -> None:
        self.command = tuple(args)
        self.returncode = returncode
        self.stderr = stderr.strip()
        detail = self.stderr or f"exit status {returncode}"
        super().__init__(f"git {' '.join(self.command)} failed: {detail}")


class ScanFailure(BucketPushError):
    """Raised when the working tree changes cannot be enumerated."""


class TransactionFailure(BucketPushError):
    """Raised when one stage of a bucket transaction fails."""

    stage = "transaction"

    def __init__(self, bucket: str, reason: str) -> None:
        self.bucket = bucket
        self.reason = reason
        super().__init__(f"{self.stage} failed for bucket {bucket}: {reason}")


class StageFailure(TransactionFailure):
    """Raised when the bucket files cannot be added to the index."""

    stage = "stage"


class CommitFailure(TransactionFailure):
    """Raised when the bucket commit cannot be created."""

    stage = "commit"


class PushFailure(TransactionFailure):
    """Raised when the remote rejects the push or cannot be reached."""

    stage = "push"


__all__ = [
    "BucketPushError",
    "CommitFailure",
    "ConfigurationError",
    "GitCommandError",
    "PushFailure",
    "ScanFailure",
    "StageFailure",
    "TransactionFailure",
]
