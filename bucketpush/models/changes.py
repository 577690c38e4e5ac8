"""Data structures describing working tree changes and the buckets built from them."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ChangeStatus(str, Enum):
    """Publishable change states reported by the working tree scan."""

    MODIFIED = "modified"
    UNTRACKED = "untracked"


@dataclass(slots=True, frozen=True)
class WorkingTreeChange:
    """A file with uncommitted content, relative to the repository root."""

    path: str
    status: ChangeStatus


@dataclass(slots=True, frozen=True)
class BucketKey:
    """Year/month key derived from a dated file path."""

    year: str
    month: str

    def __str__(self) -> str:
        return f"{self.year}/{self.month}"


@dataclass(slots=True, frozen=True)
class Bucket:
    """Group of changed files sharing the same :class:`BucketKey`."""

    key: BucketKey
    files: tuple[str, ...]

    def __post_init__(self) -> None:
        if not self.files:
            raise ValueError(f"Bucket {self.key} must contain at least one file")

    def __len__(self) -> int:
        return len(self.files)
