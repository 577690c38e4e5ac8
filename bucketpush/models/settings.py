"""Configuration values consumed by the scanner, bucketizer and publish pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


DEFAULT_ROOT = "dates"
DEFAULT_MESSAGE_TEMPLATE = "Update {key}"


@dataclass(slots=True, frozen=True)
class CommitIdentity:
    """Author and committer identity applied to bucket commits."""

    name: str
    email: str

    def as_env(self) -> dict[str, str]:
        return {
            "GIT_AUTHOR_NAME": self.name,
            "GIT_AUTHOR_EMAIL": self.email,
            "GIT_COMMITTER_NAME": self.name,
            "GIT_COMMITTER_EMAIL": self.email,
        }


@dataclass(slots=True, frozen=True)
class PublishSettings:
    """Resolved settings for a single publish cycle."""

    repo_path: Path = Path(".")
    root: str = DEFAULT_ROOT
    key_pattern: str | None = None
    remote: str | None = None
    branch: str | None = None
    git_executable: str = "git"
    message_template: str = DEFAULT_MESSAGE_TEMPLATE
    identity: CommitIdentity | None = None
    dry_run: bool = False
