"""Tests for config/loader.py module.

Covers:
- _load_yaml() function
- _deep_merge() function
- load_config() precedence
"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from versecue.config.loader import _deep_merge, _load_yaml, load_config
from versecue.core.errors import ConfigError


@pytest.fixture(autouse=True)
def _no_global_config(tmp_path: Path):
    """Point the global config at a path that doesn't exist."""
    with patch("versecue.config.loader.GLOBAL_CONFIG_PATH", tmp_path / "absent.yaml"):
        yield


class TestLoadYaml:
    """Tests for _load_yaml function."""

    def test_returns_empty_dict_for_missing_file(self, tmp_path: Path) -> None:
        assert _load_yaml(tmp_path / "nonexistent.yaml") == {}

    def test_loads_valid_yaml(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "config.yaml"
        yaml_file.write_text("retrieval:\n  top_k: 3\n")
        assert _load_yaml(yaml_file) == {"retrieval": {"top_k": 3}}

    def test_returns_empty_for_empty_file(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "empty.yaml"
        yaml_file.write_text("")
        assert _load_yaml(yaml_file) == {}

    def test_raises_config_error_for_invalid_yaml(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "invalid.yaml"
        yaml_file.write_text("logging:\n  level:\n    - invalid: [unclosed")
        with pytest.raises(ConfigError):
            _load_yaml(yaml_file)

    def test_raises_config_error_for_non_mapping(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "list.yaml"
        yaml_file.write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="mapping"):
            _load_yaml(yaml_file)


class TestDeepMerge:
    """Tests for _deep_merge function."""

    def test_override_wins(self) -> None:
        assert _deep_merge({"a": 1}, {"a": 2}) == {"a": 2}

    def test_nested_dicts_merge(self) -> None:
        base = {"retrieval": {"top_k": 5, "rrf_k": 60}}
        override = {"retrieval": {"top_k": 3}}
        assert _deep_merge(base, override) == {"retrieval": {"top_k": 3, "rrf_k": 60}}

    def test_base_not_mutated(self) -> None:
        base = {"a": {"b": 1}}
        _deep_merge(base, {"a": {"b": 2}})
        assert base == {"a": {"b": 1}}


class TestLoadConfig:
    """Tests for load_config precedence."""

    def test_defaults_without_files(self, tmp_path: Path) -> None:
        config = load_config(tmp_path / "missing.yaml")
        assert config.retrieval.top_k == 5
        assert config.embedding.batch_size == 500

    def test_yaml_file_applies(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("retrieval:\n  top_k: 3\nembedding:\n  batch_size: 64\n")
        config = load_config(path)
        assert config.retrieval.top_k == 3
        assert config.embedding.batch_size == 64

    def test_env_overrides_yaml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("logging:\n  level: INFO\n")
        monkeypatch.setenv("VERSECUE__LOGGING__LEVEL", "DEBUG")
        config = load_config(path)
        assert config.logging.level == "DEBUG"

    def test_kwargs_override_env(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("VERSECUE__LOGGING__LEVEL", "DEBUG")
        config = load_config(tmp_path / "missing.yaml", logging={"level": "ERROR"})
        assert config.logging.level == "ERROR"

    def test_global_config_is_overridden_by_local(self, tmp_path: Path) -> None:
        global_path = tmp_path / "global.yaml"
        global_path.write_text("retrieval:\n  top_k: 7\n  rrf_k: 30\n")
        local_path = tmp_path / "local.yaml"
        local_path.write_text("retrieval:\n  top_k: 2\n")
        with patch("versecue.config.loader.GLOBAL_CONFIG_PATH", global_path):
            config = load_config(local_path)
        assert config.retrieval.top_k == 2
        assert config.retrieval.rrf_k == 30

    def test_invalid_value_raises_config_error(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("retrieval:\n  top_k: 0\n")
        with pytest.raises(ConfigError) as exc_info:
            load_config(path)
        assert "retrieval" in exc_info.value.details["field"]
