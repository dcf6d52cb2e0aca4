from __future__ import annotations

import json
from pathlib import Path

import pytest
import yaml

from qsearch.config import ConfigLocator, ConfigRepository, QSearchConfig


def test_config_locator_uses_env_and_creates_directories(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("QSEARCH_HOME", str(tmp_path / "env-home"))
    locator = ConfigLocator(home=tmp_path / "ignored")

    assert locator.home == (tmp_path / "env-home").resolve()
    assert locator.logs_dir == locator.home / "logs"
    assert locator.logs_dir.is_dir()
    assert locator.config_path() == locator.home / "config.yaml"


def test_config_locator_explicit_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("QSEARCH_HOME", raising=False)
    locator = ConfigLocator(home=tmp_path / "explicit")
    assert locator.home == (tmp_path / "explicit").resolve()


def test_first_load_writes_defaults(temp_config_repository: ConfigRepository) -> None:
    config = temp_config_repository.load()
    path = temp_config_repository.locator.config_path()

    assert config == QSearchConfig()
    assert path.exists()
    assert yaml.safe_load(path.read_text(encoding="utf-8"))["pool"]["event_workers"] == 15


def test_roundtrip(temp_config_repository: ConfigRepository) -> None:
    config = QSearchConfig.model_validate(
        {"catalog": {"event_json_url": "http://events.test/"}, "pool": {"event_workers": 4}}
    )
    temp_config_repository.save(config)

    fresh = ConfigRepository(temp_config_repository.locator)
    assert fresh.load() == config


def test_explicit_json_file(tmp_path: Path, temp_config_repository: ConfigRepository) -> None:
    path = tmp_path / "qsearch.json"
    path.write_text(json.dumps({"http": {"timeout": 5, "user_agent": "qsearch-ci"}}), encoding="utf-8")

    config = temp_config_repository.load(path)
    assert config.http.timeout == 5.0
    assert config.http.user_agent == "qsearch-ci"


def test_missing_explicit_file(tmp_path: Path, temp_config_repository: ConfigRepository) -> None:
    with pytest.raises(FileNotFoundError):
        temp_config_repository.load(tmp_path / "missing.yaml")


def test_non_mapping_file_is_rejected(tmp_path: Path, temp_config_repository: ConfigRepository) -> None:
    path = tmp_path / "list.yaml"
    path.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ValueError):
        temp_config_repository.load(path)


def test_unsupported_format(tmp_path: Path, temp_config_repository: ConfigRepository) -> None:
    path = tmp_path / "qsearch.toml"
    path.write_text("[pool]\nevent_workers = 2\n", encoding="utf-8")
    with pytest.raises(ValueError, match="Unsupported configuration format"):
        temp_config_repository.load(path)


def test_empty_yaml_means_defaults(tmp_path: Path, temp_config_repository: ConfigRepository) -> None:
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")
    assert temp_config_repository.load(path) == QSearchConfig()
