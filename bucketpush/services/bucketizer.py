"""Group working tree changes into year/month buckets derived from their paths."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Iterable

from bucketpush.models.changes import Bucket, BucketKey, WorkingTreeChange
from bucketpush.models.settings import DEFAULT_ROOT
from bucketpush.services.errors import ConfigurationError
from bucketpush.utils.paths import normalise_repo_path, normalise_root


logger = logging.getLogger(__name__)

_REQUIRED_GROUPS = frozenset({"year", "month"})


def default_key_pattern(root: str = DEFAULT_ROOT) -> str:
    """Return the ``<root>/YYYY/MM/`` pattern for the given scan root."""

    prefix = normalise_root(root)
    lead = f"{re.escape(prefix)}/" if prefix else ""
    return rf"^{lead}(?P<year>\d{{4}})/(?P<month>\d{{2}})/"


@dataclass(slots=True)
class BucketKeyParser:
    """Extract a :class:`BucketKey` from a repository-relative path."""

    pattern: str = field(default_factory=default_key_pattern)
    _compiled: re.Pattern[str] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        try:
            compiled = re.compile(self.pattern)
        except re.error as exc:
            raise ConfigurationError(f"Invalid bucket key pattern {self.pattern!r}: {exc}") from exc

        missing = _REQUIRED_GROUPS - set(compiled.groupindex)
        if missing:
            raise ConfigurationError(
                f"Bucket key pattern {self.pattern!r} must define named groups: {', '.join(sorted(missing))}"
            )
        self._compiled = compiled

    def parse(self, path: str) -> BucketKey | None:
        """Return the key for ``path`` or ``None`` when the path is not bucketable."""

        match = self._compiled.search(normalise_repo_path(path))
        if match is None:
            return None
        return BucketKey(year=match.group("year"), month=match.group("month"))


@dataclass(slots=True)
class Bucketizer:
    """Partition changes into buckets ordered by ascending key."""

    parser: BucketKeyParser = field(default_factory=BucketKeyParser)

    def bucketize(self, changes: Iterable[WorkingTreeChange]) -> list[Bucket]:
        grouped: dict[BucketKey, dict[str, None]] = {}
        for change in sorted(changes, key=lambda item: item.path):
            key = self.parser.parse(change.path)
            if key is None:
                logger.debug("No bucket key for %s; leaving it unpublished", change.path)
                continue
            grouped.setdefault(key, {})[normalise_repo_path(change.path)] = None

        return [
            Bucket(key=key, files=tuple(files))
            for key, files in sorted(grouped.items(), key=lambda item: str(item[0]))
        ]
