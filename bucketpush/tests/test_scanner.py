from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Callable

import pytest

from bucketpush.models.changes import ChangeStatus, WorkingTreeChange
from bucketpush.models.settings import PublishSettings
from bucketpush.services.errors import ScanFailure
from bucketpush.services.scanner import ChangeScanner, parse_porcelain


def test_parse_porcelain_keeps_modified_and_untracked_entries() -> None:
    output = "\0".join(
        [
            "?? dates/2024/01/2024-01-31.csv",
            " M dates/2023/12/2023-12-30.csv",
            "A  dates/2023/12/2023-12-31.csv",
            "D  dates/2023/11/2023-11-01.csv",
            "R  dates/2024/02/2024-02-01.csv",
            "dates/2024/02/old-name.csv",
            "UU dates/2024/03/2024-03-01.csv",
            "",
        ]
    )

    changes = parse_porcelain(output)

    assert changes == [
        WorkingTreeChange("dates/2024/01/2024-01-31.csv", ChangeStatus.UNTRACKED),
        WorkingTreeChange("dates/2023/12/2023-12-30.csv", ChangeStatus.MODIFIED),
        WorkingTreeChange("dates/2023/12/2023-12-31.csv", ChangeStatus.MODIFIED),
        WorkingTreeChange("dates/2024/02/2024-02-01.csv", ChangeStatus.MODIFIED),
    ]


def test_parse_porcelain_handles_empty_output() -> None:
    assert parse_porcelain("") == []


def test_scan_reports_changes_under_root_only(
    work_repo: Path, git: Callable[..., str], write_file: Callable[..., Path]
) -> None:
    write_file(work_repo, "dates/2024/01/2024-01-01.csv")
    git("add", "dates/2024/01/2024-01-01.csv", cwd=work_repo)
    git("commit", "-m", "Seed", cwd=work_repo)

    write_file(work_repo, "dates/2024/01/2024-01-01.csv", "name,downloads\nrails,10\n")
    write_file(work_repo, "dates/2024/01/2024-01-02.csv")
    write_file(work_repo, "dates/2024/01/scratch.tmp")
    write_file(work_repo, ".gitignore", "*.tmp\n")
    write_file(work_repo, "errors.csv")

    scanner = ChangeScanner(repo_path=work_repo, root="dates")

    assert scanner.scan() == frozenset(
        {
            WorkingTreeChange("dates/2024/01/2024-01-01.csv", ChangeStatus.MODIFIED),
            WorkingTreeChange("dates/2024/01/2024-01-02.csv", ChangeStatus.UNTRACKED),
        }
    )


def test_scan_lists_untracked_files_individually(work_repo: Path, write_file: Callable[..., Path]) -> None:
    write_file(work_repo, "dates/2023/12/2023-12-30.csv")
    write_file(work_repo, "dates/2023/12/2023-12-31.csv")

    changes = ChangeScanner(repo_path=work_repo).scan()

    assert {change.path for change in changes} == {
        "dates/2023/12/2023-12-30.csv",
        "dates/2023/12/2023-12-31.csv",
    }


@pytest.mark.skipif(not sys.platform.startswith("linux"), reason="needs a byte-oriented file system")
def test_scan_keeps_non_utf8_file_names(work_repo: Path) -> None:
    month = work_repo / "dates" / "2024" / "01"
    month.mkdir(parents=True)
    raw_name = b"caf\xe9.csv"
    with open(os.fsencode(month) + b"/" + raw_name, "wb") as handle:
        handle.write(b"name,downloads\n")

    changes = ChangeScanner(repo_path=work_repo).scan()

    expected = "dates/2024/01/" + os.fsdecode(raw_name)
    assert changes == frozenset({WorkingTreeChange(expected, ChangeStatus.UNTRACKED)})
    assert os.path.exists(work_repo / expected)


def test_scan_returns_empty_set_for_clean_tree(work_repo: Path) -> None:
    assert ChangeScanner(repo_path=work_repo).scan() == frozenset()


def test_scan_outside_repository_raises(tmp_path: Path) -> None:
    plain = tmp_path / "plain"
    plain.mkdir()

    with pytest.raises(ScanFailure):
        ChangeScanner(repo_path=plain).scan()


def test_scan_with_missing_git_executable_raises(work_repo: Path) -> None:
    scanner = ChangeScanner(repo_path=work_repo, git_executable="git-does-not-exist")

    with pytest.raises(ScanFailure):
        scanner.scan()


def test_scanner_default_root_matches_settings_default() -> None:
    assert ChangeScanner(repo_path=Path(".")).root == PublishSettings().root
