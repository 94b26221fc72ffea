"""Configuration models and YAML loader for the resume review engine."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator

DEFAULT_NAMESPACE = "review"


class StorageConfig(BaseModel):
    """Where the profile, its backup, and suggestion output live on disk."""

    data_dir: str = "data"

    @property
    def root(self) -> Path:
        return Path(self.data_dir)

    @property
    def profile_path(self) -> Path:
        return self.root / "profile.json"

    @property
    def backup_path(self) -> Path:
        return self.root / "profile.backup.json"

    @property
    def output_dir(self) -> Path:
        return self.root / "output"


class SearchSettings(BaseModel):
    """Defaults applied to every job search."""

    results: int = Field(default=15, ge=1, le=200)
    cache_ttl_minutes: float = Field(default=30.0, gt=0)
    request_timeout: float = Field(default=20.0, gt=0)
    greenhouse_boards: list[str] = Field(default_factory=list)
    lever_sites: list[str] = Field(default_factory=list)

    @field_validator("greenhouse_boards", "lever_sites")
    @classmethod
    def strip_board_names(cls, v: list[str]) -> list[str]:
        return [b.strip() for b in v if b.strip()]


class ServerConfig(BaseModel):
    """Local review UI server."""

    host: str = "127.0.0.1"
    port: int = Field(default=3456, ge=1, le=65535)


class Settings(BaseModel):
    """Top-level settings loaded from YAML."""

    storage: StorageConfig = Field(default_factory=StorageConfig)
    search: SearchSettings = Field(default_factory=SearchSettings)
    server: ServerConfig = Field(default_factory=ServerConfig)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Settings":
        """Load settings from a YAML file."""
        path = Path(path)
        if not path.exists():
            msg = f"Config file not found: {path}"
            raise FileNotFoundError(msg)
        raw: dict[str, Any] = yaml.safe_load(path.read_text()) or {}
        return cls.model_validate(raw)

    @classmethod
    def load(cls, path: str | Path | None = None) -> "Settings":
        """Load from ``path`` if given, otherwise return all defaults."""
        if path is None:
            return cls()
        return cls.from_yaml(path)
