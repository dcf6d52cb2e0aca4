"""Configuration loading helpers for qsearch."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path

import yaml

from .models import QSearchConfig

CONFIG_FILENAME = "config.yaml"
_YAML_SUFFIXES = (".yaml", ".yml")


def _load_mapping(path: Path) -> dict:
    if path.suffix not in (*_YAML_SUFFIXES, ".json"):
        raise ValueError(f"Unsupported configuration format: {path.name}")
    with path.open("r", encoding="utf-8") as stream:
        data = yaml.safe_load(stream) if path.suffix in _YAML_SUFFIXES else json.load(stream)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Configuration file must contain a mapping: {path}")
    return data


def _dump_mapping(path: Path, payload: dict) -> None:
    with path.open("w", encoding="utf-8") as stream:
        if path.suffix in _YAML_SUFFIXES:
            yaml.safe_dump(payload, stream, allow_unicode=True, sort_keys=False)
        else:
            json.dump(payload, stream, indent=2, ensure_ascii=False)


@dataclass(slots=True)
class ConfigLocator:
    """Resolve important paths from the qsearch home directory."""

    home: Path | None = None
    logs_dir: Path | None = None

    def __post_init__(self) -> None:
        env_root = os.environ.get("QSEARCH_HOME")
        if env_root:
            root = Path(env_root).expanduser().resolve()
        else:
            root = (self.home or Path.home() / ".qsearch").expanduser().resolve()
        self.home = root
        self.logs_dir = (root / "logs").resolve()
        self.ensure_directories()

    def ensure_directories(self) -> None:
        for directory in (self.home, self.logs_dir):
            directory.mkdir(parents=True, exist_ok=True)

    def config_path(self) -> Path:
        return self.home / CONFIG_FILENAME


class ConfigRepository:
    """Repository encapsulating config IO and schema validation."""

    def __init__(self, locator: ConfigLocator | None = None) -> None:
        self.locator = locator or ConfigLocator()
        self._cache: QSearchConfig | None = None

    def load(self, path: Path | None = None) -> QSearchConfig:
        """Load an explicit file, or the home config (created with defaults if absent)."""

        if path is not None:
            if not path.exists():
                raise FileNotFoundError(f"Configuration not found: {path}")
            return QSearchConfig.model_validate(_load_mapping(path))
        if self._cache is not None:
            return self._cache
        default_path = self.locator.config_path()
        if default_path.exists():
            config = QSearchConfig.model_validate(_load_mapping(default_path))
        else:
            config = QSearchConfig()
            self.save(config)
        self._cache = config
        return config

    def save(self, config: QSearchConfig) -> Path:
        path = self.locator.config_path()
        _dump_mapping(path, config.model_dump(mode="json"))
        self._cache = config
        return path


__all__ = ["ConfigLocator", "ConfigRepository", "CONFIG_FILENAME"]
