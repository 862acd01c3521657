# tests/unit/core/test_config.py
"""Tests for settings schema and Dynaconf loading."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from dagdemo.core.config import DagDemoSettings, SimNetSettings, load_settings


class TestDagDemoSettings:
    def test_defaults(self) -> None:
        settings = DagDemoSettings()

        assert settings.node_count == 4
        assert settings.block_count == 50
        assert settings.title == "dag"
        assert settings.log_level == "INFO"
        assert settings.json_logs is False
        assert settings.simnet == SimNetSettings()

    def test_simnet_defaults(self) -> None:
        simnet = SimNetSettings()

        assert simnet.seed is None
        assert simnet.max_parents == 3
        assert simnet.block_interval_ms == 1

    def test_settings_are_frozen(self) -> None:
        settings = DagDemoSettings()

        with pytest.raises(ValidationError):
            settings.node_count = 8  # type: ignore[misc]

    @pytest.mark.parametrize("field", ["node_count", "block_count"])
    def test_counts_must_be_positive(self, field: str) -> None:
        with pytest.raises(ValidationError):
            DagDemoSettings(**{field: 0})

    def test_max_parents_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            SimNetSettings(max_parents=0)

    def test_unknown_keys_rejected(self) -> None:
        with pytest.raises(ValidationError):
            DagDemoSettings(nodes=4)  # type: ignore[call-arg]

    def test_log_level_case_insensitive(self) -> None:
        assert DagDemoSettings(log_level="debug").log_level == "DEBUG"  # type: ignore[arg-type]

    def test_invalid_log_level_rejected(self) -> None:
        with pytest.raises(ValidationError):
            DagDemoSettings(log_level="LOUD")  # type: ignore[arg-type]


class TestLoadSettings:
    def test_no_file_no_env_gives_defaults(self) -> None:
        assert load_settings() == DagDemoSettings()

    def test_env_overrides_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DAGDEMO_NODE_COUNT", "6")
        monkeypatch.setenv("DAGDEMO_BLOCK_COUNT", "10")

        settings = load_settings()

        assert settings.node_count == 6
        assert settings.block_count == 10

    def test_nested_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DAGDEMO_SIMNET__SEED", "7")

        settings = load_settings()

        assert settings.simnet.seed == 7
        assert settings.simnet.max_parents == 3

    def test_load_from_yaml_file(self, tmp_path: Path) -> None:
        config_file = tmp_path / "settings.yaml"
        config_file.write_text(
            """
node_count: 3
block_count: 20
title: nightly
simnet:
  seed: 9
  max_parents: 2
"""
        )

        settings = load_settings(config_file)

        assert settings.node_count == 3
        assert settings.block_count == 20
        assert settings.title == "nightly"
        assert settings.simnet.seed == 9
        assert settings.simnet.max_parents == 2

    def test_env_beats_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        config_file = tmp_path / "settings.yaml"
        config_file.write_text("node_count: 3\n")
        monkeypatch.setenv("DAGDEMO_NODE_COUNT", "5")

        assert load_settings(config_file).node_count == 5

    def test_load_validates_schema(self, tmp_path: Path) -> None:
        config_file = tmp_path / "settings.yaml"
        config_file.write_text("block_count: 0\n")

        with pytest.raises(ValidationError):
            load_settings(config_file)

    def test_load_missing_file_raises_file_not_found(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError, match="nonexistent"):
            load_settings(tmp_path / "nonexistent.yaml")

    def test_settings_file_variable_is_not_a_setting(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        config_file = tmp_path / "settings.yaml"
        config_file.write_text("node_count: 2\n")
        monkeypatch.setenv("DAGDEMO_SETTINGS_FILE", str(config_file))

        assert load_settings(config_file).node_count == 2
