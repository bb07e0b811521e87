"""Tests for FixtureConfig loading and per-type resolution."""

import logging

import pytest
import yaml

from fixtureforge import config as config_module
from fixtureforge.config import FixtureConfig, type_key
from tests.sample_types import Address, Node

ENV_VARS = [
    "FIXTUREFORGE_ELEMENT_COUNT",
    "FIXTUREFORGE_MAX_DEPTH",
    "FIXTUREFORGE_STRING_LENGTH",
    "FIXTUREFORGE_MEMOIZE",
    "FIXTUREFORGE_SEED",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(config_module, "CONFIG_FILE", tmp_path / "missing.yaml")
    monkeypatch.setattr(config_module, "_ensure_dotenv", lambda: None)


class TestDefaults:
    def test_defaults(self):
        config = FixtureConfig()
        assert config.element_count == 5
        assert config.max_depth == 1
        assert config.string_length == 10
        assert config.memoize is False
        assert config.seed is None

    def test_negative_values_rejected(self):
        with pytest.raises(ValueError, match="element_count"):
            FixtureConfig(element_count=-1)
        with pytest.raises(ValueError, match="max_depth"):
            FixtureConfig(max_depth=-1)

    def test_replace_returns_new_config(self):
        config = FixtureConfig()
        changed = config.replace(element_count=2)
        assert changed.element_count == 2
        assert config.element_count == 5

    def test_load_without_file_uses_defaults(self):
        assert FixtureConfig.load() == FixtureConfig()


class TestFileAndEnv:
    def test_load_from_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(
            yaml.safe_dump(
                {"element_count": 2, "memoize": True, "max_depths": {"Node": 3}}
            )
        )
        config = FixtureConfig.load(path)
        assert config.element_count == 2
        assert config.memoize is True
        assert config.max_depth_for(Node) == 3

    def test_explicit_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            FixtureConfig.load(tmp_path / "nope.yaml")

    def test_unknown_keys_warned(self, tmp_path, caplog):
        path = tmp_path / "config.yaml"
        path.write_text("element_count: 3\ncolour: blue\n")
        with caplog.at_level(logging.WARNING, logger="fixtureforge"):
            config = FixtureConfig.load(path)
        assert config.element_count == 3
        assert "colour" in caplog.text

    def test_env_overrides_file(self, tmp_path, monkeypatch):
        path = tmp_path / "config.yaml"
        path.write_text("element_count: 3\nseed: 1\n")
        monkeypatch.setenv("FIXTUREFORGE_ELEMENT_COUNT", "8")
        monkeypatch.setenv("FIXTUREFORGE_MEMOIZE", "yes")
        config = FixtureConfig.load(path)
        assert config.element_count == 8
        assert config.seed == 1
        assert config.memoize is True

    def test_invalid_env_value_ignored(self, monkeypatch, caplog):
        monkeypatch.setenv("FIXTUREFORGE_MAX_DEPTH", "deep")
        with caplog.at_level(logging.WARNING, logger="fixtureforge"):
            config = FixtureConfig.load()
        assert config.max_depth == 1
        assert "FIXTUREFORGE_MAX_DEPTH" in caplog.text

    def test_save_round_trip(self, tmp_path):
        config = FixtureConfig(element_count=4, element_counts={"Address": 2})
        path = config.save(tmp_path / "out" / "config.yaml")
        assert FixtureConfig.load(path) == config


class TestPerType:
    def test_full_key_wins_over_bare_name(self):
        config = FixtureConfig(element_counts={type_key(Address): 1, "Address": 9})
        assert config.element_count_for(Address) == 1

    def test_bare_name(self):
        config = FixtureConfig(max_depths={"Node": 4})
        assert config.max_depth_for(Node) == 4
        assert config.max_depth_for(Address) == 1

    def test_type_key(self):
        assert type_key(Address) == "tests.sample_types.Address"
