"""Thin subprocess wrapper for running git inside a working tree."""

from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path
from typing import Mapping

from bucketpush.services.errors import GitCommandError


logger = logging.getLogger(__name__)


def run_git(
    *args: str,
    cwd: Path,
    git_executable: str = "git",
    env: Mapping[str, str] | None = None,
) -> subprocess.CompletedProcess[str]:
    """Execute a git command within ``cwd`` and raise on error.

    ``env`` is merged over the current process environment so callers only pass
    the variables they override (for example the commit identity). Output is
    decoded as UTF-8 with ``surrogateescape`` so undecodable file names
    round-trip to the same paths ``os.fsdecode`` produces.
    """

    merged_env = None
    if env:
        merged_env = {**os.environ, **env}

    logger.debug("git %s (cwd=%s)", " ".join(args), cwd)
    try:
        result = subprocess.run(
            [git_executable, *args],
            cwd=cwd,
            env=merged_env,
            encoding="utf-8",
            errors="surrogateescape",
            check=False,
            capture_output=True,
        )
    except OSError as exc:
        raise GitCommandError(args, None, str(exc)) from exc

    if result.returncode != 0:
        raise GitCommandError(args, result.returncode, result.stderr)
    return result
