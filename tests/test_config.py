"""Tests for configuration and saved preferences.

**Feature: average-down**
"""

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from avgdown.config import (
    PREFERENCE_DEFAULTS,
    ConfigError,
    create_template_config,
    get_config_path,
    get_log_level,
    get_preference,
    load_config,
    save_preference,
)


@pytest.fixture
def config_path(tmp_path, monkeypatch):
    """Point the config at a temporary file."""
    path = tmp_path / "avgdown" / "config.toml"
    monkeypatch.setenv("AVGDOWN_CONFIG", str(path))
    return path


class TestPreferencePersistence:
    """
    **Feature: average-down, Property 7: Preference Persistence**

    *For any* valid percentage, a saved preference is read back unchanged.
    """

    @given(
        name=st.sampled_from(sorted(PREFERENCE_DEFAULTS)),
        value=st.integers(min_value=0, max_value=10000).map(lambda n: n / 100),
    )
    @settings(max_examples=50)
    def test_saved_value_round_trips(self, tmp_path_factory, name: str, value: float):
        path = tmp_path_factory.mktemp("cfg") / "config.toml"

        save_preference(name, value, path)

        assert get_preference(name, load_config(path)) == pytest.approx(value)

    def test_saving_one_keeps_the_other(self, config_path):
        save_preference("target_loss", 25)
        save_preference("monitor_target_loss", 15)

        config = load_config()
        assert get_preference("target_loss", config) == 25
        assert get_preference("monitor_target_loss", config) == 15


class TestDefaults:
    """Defaults apply when nothing valid is saved."""

    def test_missing_file(self, config_path):
        assert load_config() is None
        assert get_preference("target_loss", None) == PREFERENCE_DEFAULTS["target_loss"]

    def test_unreadable_file(self, config_path):
        config_path.parent.mkdir(parents=True)
        config_path.write_text("this is = = not toml")

        assert load_config() is None

    @pytest.mark.parametrize("value", ["abc", 150, -3])
    def test_bad_saved_value(self, value):
        config = {"preferences": {"target_loss": value}}

        assert get_preference("target_loss", config) == PREFERENCE_DEFAULTS["target_loss"]

    def test_unknown_preference(self):
        with pytest.raises(KeyError):
            get_preference("nope")

    def test_log_level(self):
        assert get_log_level(None) == "WARNING"
        assert get_log_level({"logging": {"level": "debug"}}) == "DEBUG"


class TestSaveValidation:
    """save_preference rejects unknown keys and out-of-range values."""

    def test_out_of_range(self, config_path):
        with pytest.raises(ValueError):
            save_preference("target_loss", 101)
        assert not config_path.exists()

    def test_unknown_key(self, config_path):
        with pytest.raises(KeyError):
            save_preference("volume", 5)


def test_env_override(config_path):
    assert get_config_path() == config_path


def test_template_config(config_path):
    create_template_config()

    config = load_config()
    assert config["preferences"] == PREFERENCE_DEFAULTS
    assert config["logging"]["level"] == "WARNING"


class TestMalformedConfig:
    """Hand-edited files with the wrong shape are never overwritten."""

    def test_save_refuses_unparseable_file(self, config_path):
        broken = '[logging]\nlevel = "DEBUG"\n[preferences\n'
        config_path.parent.mkdir(parents=True)
        config_path.write_text(broken)

        with pytest.raises(ConfigError):
            save_preference("target_loss", 20)

        assert config_path.read_text() == broken

    def test_save_refuses_non_table_preferences(self, config_path):
        config_path.parent.mkdir(parents=True)
        config_path.write_text("preferences = 5\n")

        with pytest.raises(ConfigError):
            save_preference("target_loss", 20)

        assert config_path.read_text() == "preferences = 5\n"

    def test_save_keeps_other_sections(self, config_path):
        config_path.parent.mkdir(parents=True)
        config_path.write_text('[logging]\nlevel = "DEBUG"\n')

        save_preference("target_loss", 20)

        config = load_config()
        assert config["logging"]["level"] == "DEBUG"
        assert get_preference("target_loss", config) == 20

    @pytest.mark.parametrize("section", [5, "x", [1, 2]])
    def test_non_table_sections_use_defaults(self, section):
        config = {"preferences": section, "logging": section}

        assert get_preference("target_loss", config) == PREFERENCE_DEFAULTS["target_loss"]
        assert get_log_level(config) == "WARNING"
