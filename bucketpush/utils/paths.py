"""Helpers for normalising repository-relative paths."""
from __future__ import annotations


def normalise_repo_path(value: str) -> str:
    """Return ``value`` as a forward-slash path without a leading ``./``."""

    path = value.replace("\\", "/").strip()
    while path.startswith("./"):
        path = path[2:]
    return path


def normalise_root(value: str | None) -> str:
    """Return the scan root without surrounding slashes; ``""`` means the whole tree."""

    if not value:
        return ""
    root = normalise_repo_path(value).strip("/")
    return "" if root == "." else root


__all__ = ["normalise_repo_path", "normalise_root"]
