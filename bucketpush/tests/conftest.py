"""Shared fixtures and helpers for the test suite."""

from __future__ import annotations

import os
import subprocess
from pathlib import Path
from typing import Callable

import pytest


def _git(*args: str, cwd: Path) -> str:
    """Run git in ``cwd`` and return stdout, failing the test on error."""

    result = subprocess.run(
        ["git", *args],
        cwd=cwd,
        check=True,
        text=True,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
    )
    return result.stdout


def _write_file(repo: Path, relative: str, content: str = "name,downloads\n") -> Path:
    path = repo / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


def _remote_subjects(remote: Path, branch: str = "main") -> list[str]:
    """Return commit subjects on ``branch`` of the bare remote, newest first."""

    return _git("log", "--format=%s", branch, cwd=remote).splitlines()


@pytest.fixture()
def git() -> Callable[..., str]:
    """Provide a helper that runs git and returns its stdout."""

    return _git


@pytest.fixture()
def write_file() -> Callable[..., Path]:
    """Provide a helper that writes a data file below a repository."""

    return _write_file


@pytest.fixture()
def remote_subjects() -> Callable[..., list[str]]:
    """Provide a helper listing commit subjects of a bare remote."""

    return _remote_subjects


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep user-level git and BUCKETPUSH settings out of the tests."""

    for name in list(os.environ):
        if name.startswith("BUCKETPUSH_"):
            monkeypatch.delenv(name)
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_CEILING_DIRECTORIES", str(tmp_path))
    monkeypatch.setenv("HOME", str(tmp_path))


@pytest.fixture()
def remote_repo(tmp_path: Path) -> Path:
    """Bare repository standing in for the remote ledger."""

    remote = tmp_path / "remote.git"
    remote.mkdir()
    _git("init", "--bare", "-b", "main", cwd=remote)
    return remote


@pytest.fixture()
def work_repo(tmp_path: Path, remote_repo: Path) -> Path:
    """Working clone with one initial commit tracking ``origin/main``."""

    repo = tmp_path / "repo"
    repo.mkdir()
    _git("init", "-b", "main", cwd=repo)
    _git("config", "user.name", "Ledger Bot", cwd=repo)
    _git("config", "user.email", "bot@example.com", cwd=repo)
    _git("config", "commit.gpgsign", "false", cwd=repo)
    _git("remote", "add", "origin", str(remote_repo), cwd=repo)

    _write_file(repo, "README.md", "Daily download counts.\n")
    _git("add", "README.md", cwd=repo)
    _git("commit", "-m", "Initial commit", cwd=repo)
    _git("push", "-u", "origin", "main", cwd=repo)
    return repo
