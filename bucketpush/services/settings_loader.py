"""Resolve :class:`PublishSettings` from defaults, a YAML file, the environment and overrides."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Mapping

import yaml

from bucketpush.models.settings import CommitIdentity, PublishSettings
from bucketpush.services.errors import ConfigurationError


_ENV_KEYS: dict[str, str] = {
    "repo_path": "BUCKETPUSH_REPO",
    "root": "BUCKETPUSH_ROOT",
    "key_pattern": "BUCKETPUSH_KEY_PATTERN",
    "remote": "BUCKETPUSH_REMOTE",
    "branch": "BUCKETPUSH_BRANCH",
    "git_executable": "BUCKETPUSH_GIT",
    "message_template": "BUCKETPUSH_MESSAGE_TEMPLATE",
    "author_name": "BUCKETPUSH_AUTHOR_NAME",
    "author_email": "BUCKETPUSH_AUTHOR_EMAIL",
    "dry_run": "BUCKETPUSH_DRY_RUN",
}

_FILE_KEYS = frozenset(_ENV_KEYS) | {"identity"}
_STRING_KEYS = frozenset(_ENV_KEYS) - {"dry_run"}
_TRUTHY = {"1", "true", "yes", "on"}


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUTHY


def load_config_file(path: Path) -> dict[str, Any]:
    """Parse a YAML mapping of settings, rejecting unknown keys."""

    try:
        payload = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigurationError(f"Unable to read config file '{path}': {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Config file '{path}' is not valid YAML: {exc}") from exc

    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ConfigurationError(f"Config file '{path}' must contain a mapping")

    unknown = sorted(set(payload) - _FILE_KEYS)
    if unknown:
        raise ConfigurationError(f"Unknown settings in '{path}': {', '.join(unknown)}")

    values = dict(payload)
    identity = values.pop("identity", None)
    if identity is not None:
        if not isinstance(identity, dict):
            raise ConfigurationError("'identity' must be a mapping with 'name' and 'email'")
        values.setdefault("author_name", identity.get("name"))
        values.setdefault("author_email", identity.get("email"))

    for key, value in values.items():
        if value is None:
            continue
        if key in _STRING_KEYS and not isinstance(value, str):
            raise ConfigurationError(f"Setting '{key}' in '{path}' must be a string, got {type(value).__name__}")
        if key == "dry_run" and not isinstance(value, (bool, str)):
            raise ConfigurationError(f"Setting 'dry_run' in '{path}' must be a boolean")
    return values


def _read_environment(environ: Mapping[str, str]) -> dict[str, Any]:
    values: dict[str, Any] = {}
    for key, env_name in _ENV_KEYS.items():
        raw = environ.get(env_name)
        if raw is not None and raw.strip():
            values[key] = raw.strip()
    return values


def _build_identity(name: Any, email: Any) -> CommitIdentity | None:
    if not name and not email:
        return None
    if not name or not email:
        raise ConfigurationError("Commit identity requires both an author name and an author email")
    return CommitIdentity(name=str(name), email=str(email))


def load_settings(
    config_path: Path | None = None,
    *,
    overrides: Mapping[str, Any] | None = None,
    environ: Mapping[str, str] | None = None,
) -> PublishSettings:
    """Return settings with precedence overrides > environment > config file > defaults.

    ``overrides`` entries whose value is ``None`` are ignored so argparse
    namespaces can be passed through directly. When ``config_path`` is not
    given, ``BUCKETPUSH_CONFIG`` is consulted.
    """

    environ = os.environ if environ is None else environ
    if config_path is None and environ.get("BUCKETPUSH_CONFIG"):
        config_path = Path(environ["BUCKETPUSH_CONFIG"])

    values: dict[str, Any] = {}
    if config_path is not None:
        values.update(load_config_file(config_path))
    values.update(_read_environment(environ))
    values.update({key: value for key, value in (overrides or {}).items() if value is not None})

    unknown = sorted(set(values) - set(_ENV_KEYS))
    if unknown:
        raise ConfigurationError(f"Unknown settings: {', '.join(unknown)}")

    defaults = PublishSettings()
    return PublishSettings(
        repo_path=Path(values.get("repo_path", defaults.repo_path)).expanduser(),
        root=str(values.get("root", defaults.root)),
        key_pattern=values.get("key_pattern") or None,
        remote=values.get("remote") or None,
        branch=values.get("branch") or None,
        git_executable=str(values.get("git_executable", defaults.git_executable)),
        message_template=str(values.get("message_template", defaults.message_template)),
        identity=_build_identity(values.get("author_name"), values.get("author_email")),
        dry_run=_parse_bool(values.get("dry_run", defaults.dry_run)),
    )


__all__ = ["load_config_file", "load_settings"]
