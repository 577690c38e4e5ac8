"""Version control port used by the publish pipeline and its git implementation."""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, Sequence

from bucketpush.models.settings import CommitIdentity
from bucketpush.services.git import run_git


class SupportsRepository(Protocol):
    """Subset of version control operations relied upon by the pipeline."""

    def stage(self, files: Sequence[str]) -> None:
        """Mark exactly ``files`` for inclusion in the next commit."""

    def commit(self, message: str, files: Sequence[str], *, identity: CommitIdentity | None = None) -> str:
        """Commit ``files`` with ``message`` and return the new commit hash."""

    def push(self) -> None:
        """Transmit local commits to the configured remote."""


@dataclass(slots=True)
class GitRepository:
    """Stage, commit and push through the ``git`` executable."""

    repo_path: Path
    remote: str | None = None
    branch: str | None = None
    git_executable: str = "git"

    def stage(self, files: Sequence[str]) -> None:
        self._run_git("add", "--", *files)

    def commit(self, message: str, files: Sequence[str], *, identity: CommitIdentity | None = None) -> str:
        """Create a commit restricted to ``files`` even if other paths are staged."""

        env = identity.as_env() if identity is not None else None
        self._run_git("commit", "--only", "-m", message, "--", *files, env=env)
        return self._run_git("rev-parse", "HEAD").stdout.strip()

    def push(self) -> None:
        self._run_git(*self.push_args())

    def push_args(self) -> list[str]:
        if self.remote is None and self.branch is None:
            return ["push"]
        refspec = f"HEAD:{self.branch}" if self.branch else "HEAD"
        return ["push", self.remote or "origin", refspec]

    def _run_git(self, *args: str, env: dict[str, str] | None = None) -> subprocess.CompletedProcess[str]:
        return run_git(*args, cwd=self.repo_path, git_executable=self.git_executable, env=env)
