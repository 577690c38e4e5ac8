"""Scanner that enumerates publishable working tree changes under the dated root."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from bucketpush.models.changes import ChangeStatus, WorkingTreeChange
from bucketpush.models.settings import DEFAULT_ROOT
from bucketpush.services.errors import GitCommandError, ScanFailure
from bucketpush.services.git import run_git
from bucketpush.utils.paths import normalise_repo_path, normalise_root


logger = logging.getLogger(__name__)

_MODIFIED_CODES = frozenset("MAT")
_RENAME_CODES = frozenset("RC")


@dataclass(slots=True)
class ChangeScanner:
    """Report modified and untracked files below ``root`` in a git working tree."""

    repo_path: Path
    root: str = DEFAULT_ROOT
    git_executable: str = "git"

    def scan(self) -> frozenset[WorkingTreeChange]:
        """Return the current changes, or an empty set when nothing is pending."""

        args = ["status", "--porcelain=v1", "-z", "--untracked-files=all"]
        root = normalise_root(self.root)
        if root:
            args.extend(["--", root])

        try:
            result = run_git(*args, cwd=self.repo_path, git_executable=self.git_executable)
        except GitCommandError as exc:
            raise ScanFailure(f"Unable to list changes in '{self.repo_path}': {exc}") from exc

        changes = frozenset(parse_porcelain(result.stdout))
        logger.debug("Scanned %d change(s) under %s", len(changes), root or ".")
        return changes


def parse_porcelain(output: str) -> list[WorkingTreeChange]:
    """Parse ``git status --porcelain=v1 -z`` output into publishable changes.

    Deleted and unmerged entries are not publishable and are skipped. Rename
    and copy records carry their source path as an extra NUL separated field,
    which is consumed and discarded.
    """

    changes: list[WorkingTreeChange] = []
    fields = output.split("\0")
    index = 0
    while index < len(fields):
        entry = fields[index]
        index += 1
        if len(entry) < 4:
            continue

        code, path = entry[:2], normalise_repo_path(entry[3:])
        if code[0] in _RENAME_CODES or code[1] in _RENAME_CODES:
            index += 1

        if code == "??":
            changes.append(WorkingTreeChange(path=path, status=ChangeStatus.UNTRACKED))
        elif "D" in code or "U" in code:
            logger.debug("Skipping non-publishable change %r %s", code, path)
        elif set(code) & (_MODIFIED_CODES | _RENAME_CODES):
            changes.append(WorkingTreeChange(path=path, status=ChangeStatus.MODIFIED))
        else:
            logger.debug("Skipping change with unrecognised status %r %s", code, path)
    return changes
