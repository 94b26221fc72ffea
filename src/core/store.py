"""File-backed storage for the profile document and per-namespace suggestions.

Layout under ``StorageConfig.data_dir``::

    profile.json               live profile (single source of truth)
    profile.backup.json        copy taken before the first change of an apply
    output/review/             default namespace
    output/<job_id>/           one directory per job namespace
        suggestions.json
        changelog.md
"""

import json
import logging
import os
import shutil
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from src.core.config import DEFAULT_NAMESPACE, StorageConfig
from src.core.schemas import ChangelogEntry, SuggestionsFile

logger = logging.getLogger(__name__)

SUGGESTIONS_FILENAME = "suggestions.json"
CHANGELOG_FILENAME = "changelog.md"
CHANGELOG_HEADER = "# Review Changelog\n\n"


class InvalidNamespaceError(ValueError):
    """Raised when a job id cannot name a directory under the output root."""


class ProfileNotFoundError(FileNotFoundError):
    """Raised when an operation needs the profile and none can be loaded."""

    def __init__(self, msg: str = "No profile found. Run `profile init` to create one.") -> None:
        super().__init__(msg)


def write_json_atomic(path: Path, data: Any) -> None:
    """Write JSON to ``path`` via a sibling temp file and a rename."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(path.name + ".tmp")
    tmp.write_text(json.dumps(data, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
    os.replace(tmp, path)


def _read_json(path: Path) -> Any | None:
    if not path.exists():
        return None
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Could not read %s: %s", path, e)
        return None


class ProfileStore:
    """Loads and saves the profile document. Knows nothing of its schema."""

    def __init__(self, config: StorageConfig) -> None:
        self._path = config.profile_path
        self._backup_path = config.backup_path

    @property
    def path(self) -> Path:
        return self._path

    @property
    def backup_path(self) -> Path:
        return self._backup_path

    def exists(self) -> bool:
        return self._path.exists()

    def load(self) -> Any | None:
        """Return the parsed profile, or None if missing or unparseable."""
        return _read_json(self._path)

    def save(self, profile: Any) -> None:
        write_json_atomic(self._path, profile)
        logger.debug("Profile written to %s", self._path)

    def backup(self) -> bool:
        """Copy the current profile to the backup path. False if there is none."""
        if not self._path.exists():
            return False
        shutil.copyfile(self._path, self._backup_path)
        logger.info("Backup saved to %s", self._backup_path)
        return True


class SuggestionStore:
    """Reads suggestion sets and appends to changelogs, one directory per namespace.

    ``job_id=None`` selects the default namespace.
    """

    def __init__(self, config: StorageConfig) -> None:
        self._output_dir = config.output_dir

    def directory(self, job_id: str | None = None) -> Path:
        """Return (and create) the output directory for a namespace.

        Raises InvalidNamespaceError for ids that would leave the output root.
        """
        name = job_id or DEFAULT_NAMESPACE
        path = self._output_dir / name
        escapes = path.resolve().parent != self._output_dir.resolve()
        if escapes or "/" in name or "\\" in name or ".." in name:
            msg = f"Invalid job id: {name!r}"
            raise InvalidNamespaceError(msg)
        path.mkdir(parents=True, exist_ok=True)
        return path

    def has_suggestions(self, job_id: str | None = None) -> bool:
        return (self.directory(job_id) / SUGGESTIONS_FILENAME).exists()

    def load(self, job_id: str | None = None) -> SuggestionsFile | None:
        """Return the namespace's suggestions, or None if absent or invalid."""
        raw = _read_json(self.directory(job_id) / SUGGESTIONS_FILENAME)
        if raw is None:
            return None
        try:
            return SuggestionsFile.model_validate(raw)
        except ValidationError as e:
            logger.warning("Invalid suggestions file for '%s': %s", job_id or DEFAULT_NAMESPACE, e)
            return None

    def append_changelog(self, job_id: str | None, entry: ChangelogEntry) -> None:
        """Append one line to the namespace changelog, creating it with a header."""
        path = self.directory(job_id) / CHANGELOG_FILENAME
        if not path.exists():
            path.write_text(CHANGELOG_HEADER, encoding="utf-8")
        with path.open("a", encoding="utf-8") as fh:
            fh.write(entry.to_line())

    def list_namespaces(self) -> list[str]:
        """Job namespaces that currently hold a suggestions file, sorted.

        Directories whose name starts with ``__`` are reserved and skipped.
        """
        if not self._output_dir.exists():
            return []
        names: list[str] = []
        for entry in sorted(self._output_dir.iterdir()):
            if not entry.is_dir() or entry.name.startswith("__"):
                continue
            if (entry / SUGGESTIONS_FILENAME).exists():
                names.append(entry.name)
        return names
